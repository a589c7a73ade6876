from __future__ import annotations

import inspect
from typing import Any, Callable, Mapping

from scenario_engine.debug_logger import warn
from scenario_engine.steps.spec import Relative


async def _call(fn: Callable[[], Any]) -> Any:
    result = fn()
    if inspect.isawaitable(result):
        result = await result
    return result


async def resolve_value(value: Any, callbacks: Mapping[str, Any]) -> Any:
    """
    Resolve a dynamic step field at execution time.

    A string naming a callback, or a zero-argument callable (sync or async),
    is called; anything else is returned as-is.
    """
    if isinstance(value, str):
        fn = callbacks.get(value)
        if callable(fn):
            return await _call(fn)
        return value
    if callable(value):
        return await _call(value)
    return value


async def resolve_to(value: Any, current: Callable[[], Any], callbacks: Mapping[str, Any]) -> Any:
    """Like resolve_value, plus inc()/dec() against the live value read via current()."""
    to = await resolve_value(value, callbacks)
    if isinstance(to, Relative):
        delta = await resolve_value(to.value, callbacks)
        return current() + to.sign * delta
    return to


async def resolve_condition(condition: Any, callbacks: Mapping[str, Any]) -> Any:
    """
    Resolve a branch condition to True/False.

    Strings name a function in the callbacks table; other callables are
    called; any other literal is taken for its truth value. Returns None
    (and warns) when a name has nothing callable behind it; callers treat
    None as "no decision".
    """
    if isinstance(condition, str):
        fn = callbacks.get(condition)
        if not callable(fn):
            warn("runtime", f"Missing condition function {condition!r}")
            return None
        return bool(await _call(fn))
    if callable(condition):
        return bool(await _call(condition))
    return bool(condition)
