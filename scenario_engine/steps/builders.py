"""
Authoring helpers for scenarios.

    move("x", 100, 500)                          # absolute
    move("x", inc(50), 500)                      # relative forward
    move("x", dec(30), 300)                      # relative backward
    move("x", 200, 500, "slideBack")             # with display label
    move("x", 150, 400, easing="out_quad", native=False)

Durations are milliseconds.
"""
from __future__ import annotations
from typing import Any, Iterable, Optional, Sequence, Tuple

from .spec import (
    UNSET,
    Callback,
    Comment,
    Delay,
    Goto,
    Hold,
    IfElse,
    IfEnd,
    IfJump,
    IfThen,
    Label,
    Move,
    Parallel,
    Relative,
    Resume,
    Set,
    Step,
    Stop,
    Use,
    Vibrate,
)


Scenario = Tuple[Any, ...]


def move(
    target: str,
    to: Any,
    duration: Any,
    label: Optional[str] = None,
    *,
    easing: Any = None,
    native: Optional[bool] = None,
) -> Move:
    return Move(target, to, duration, easing=easing, native=native, label=label or None)


def inc(value: Any) -> Relative:
    return Relative(1, value)


def dec(value: Any) -> Relative:
    return Relative(-1, value)


def delay(duration: Any, label: Optional[str] = None) -> Delay:
    return Delay(duration, label=label or None)


def parallel(targets: Iterable[Any], label: Optional[str] = None) -> Parallel:
    return Parallel(tuple(targets), label=label or None)


def vibrate(label: Optional[str] = None) -> Vibrate:
    return Vibrate(label=label or None)


def callback(name: str, value: Any = UNSET, label: Optional[str] = None) -> Callback:
    return Callback(name, value, label=label or None)


def hold(label: Optional[str] = None) -> Hold:
    return Hold(label=label or None)


def label(name: str) -> Label:
    return Label(label=name)


def comment(text: str) -> Comment:
    return Comment(text or "")


def use(block: str) -> Use:
    return Use(block)


def goto(label: str) -> Goto:
    return Goto(label=label)


def set_value(target: str, value: Any) -> Set:
    return Set(target, value)


set_ = set_value


def resume() -> Resume:
    return Resume()


def stop() -> Stop:
    return Stop()


def if_jump(condition: Any, label_true: str, label_false: Optional[str] = None) -> IfJump:
    return IfJump(condition, label_true, label_false or None)


def if_then(condition: Any) -> IfThen:
    return IfThen(condition)


def if_else() -> IfElse:
    return IfElse()


def if_end() -> IfEnd:
    return IfEnd()


def define_scenario(steps: Sequence[Any]) -> Scenario:
    """Freeze an authored step list. Shape checks happen at compile time."""
    if isinstance(steps, (str, bytes)) or not isinstance(steps, (list, tuple)):
        raise TypeError("define_scenario() requires a list or tuple of steps")
    return tuple(steps)


__all__ = [
    "Scenario",
    "Step",
    "move",
    "inc",
    "dec",
    "delay",
    "parallel",
    "vibrate",
    "callback",
    "hold",
    "label",
    "comment",
    "use",
    "goto",
    "set_value",
    "set_",
    "resume",
    "stop",
    "if_jump",
    "if_then",
    "if_else",
    "if_end",
    "define_scenario",
]
