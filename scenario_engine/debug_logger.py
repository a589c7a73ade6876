# scenario_engine/debug_logger.py

from __future__ import annotations

import logging
from typing import Any, Iterable

# ----------------------------------------------------------------------
# Core debug toggles
# ----------------------------------------------------------------------

DEBUG_ENABLED: bool = True

ENABLED_CATEGORIES: set[str] = {
    "compile",  # flatten / validation tracing
    "runtime",  # interpreter step dispatch
    "driver",   # value driver animations
}

_LOGGER_ROOT = "scenario_engine"


def enable_categories(*cats: str) -> None:
    ENABLED_CATEGORIES.update(cats)


def disable_categories(*cats: str) -> None:
    for c in cats:
        ENABLED_CATEGORIES.discard(c)


def set_categories(cats: Iterable[str]) -> None:
    global ENABLED_CATEGORIES
    ENABLED_CATEGORIES = set(cats)


def get_logger(category: str) -> logging.Logger:
    return logging.getLogger(f"{_LOGGER_ROOT}.{category}")


def log(category: str, message: str) -> None:
    if not DEBUG_ENABLED:
        return
    if category not in ENABLED_CATEGORIES:
        return
    get_logger(category).debug(message)


def warn(category: str, message: str) -> None:
    """Warnings are never gated: they describe authoring mistakes."""
    get_logger(category).warning(message)


# ----------------------------------------------------------------------
# High-level scenario debug helper
# ----------------------------------------------------------------------

class ScenarioDebug:
    """
    Formats structured snapshots of compiled programs and interpreters.

    Compiler and interpreter code should call these helpers instead of
    hand-rolling multi-line debug strings.
    """

    def program_snapshot(self, program: Any) -> str:
        rows: list[str] = []
        for i, step in enumerate(getattr(program, "steps", ())):
            target = getattr(step, "target", None)
            if target is None and isinstance(getattr(step, "targets", None), (list, tuple)):
                target = ",".join(str(getattr(t, "target", "?")) for t in step.targets)
            rows.append(
                f"  [{i:>3}] {step.type:<8} "
                f"label={getattr(step, 'label', None) or ''!s:<12} "
                f"target={target or ''!s:<10} "
                f"to={_short(getattr(step, 'to', ''))} "
                f"name={getattr(step, 'name', '') or ''} "
                f"block={getattr(step, 'source_block', None) or ''}"
            )
        labels = getattr(program, "labels", {})
        body = "\n".join(rows)
        text = f"[PROGRAM] {len(rows)} steps, labels={dict(labels)}\n{body}"
        log("compile", text)
        return text

    def state_snapshot(self, interpreter: Any) -> str:
        state = getattr(interpreter, "state", None)
        lines: list[str] = []
        lines.append("=== DEBUG: Interpreter State ===")
        lines.append(f"cursor: {getattr(state, 'cursor', None)}")
        lines.append(f"current_index: {getattr(interpreter, 'current_index', None)}")
        lines.append(f"return_address: {getattr(state, 'return_address', None)!r}")
        lines.append(f"holding: {getattr(state, 'hold', None) is not None}")
        lines.append(f"stopped: {getattr(state, 'stopped', None)}")
        lines.append(f"vibrated: {getattr(state, 'vibrated', None)}")
        values = getattr(interpreter, "values", {}) or {}
        lines.append("")
        lines.append("Values:")
        for name, value in sorted(values.items()):
            lines.append(f"  {name}: {value:.3f}" if isinstance(value, float) else f"  {name}: {value!r}")
        lines.append("=== END INTERPRETER DEBUG ===")
        text = "\n".join(lines)
        log("runtime", text)
        return text


def _short(value: Any) -> str:
    if callable(value):
        return getattr(value, "__name__", "fn")
    return "" if value == "" else repr(value)
