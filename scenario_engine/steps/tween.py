from __future__ import annotations
import math
from typing import Callable, Dict, Optional, Union


# Easing curves for move/parallel steps. t runs 0..1, output 0..1.

def ease_linear(t: float) -> float:
    return t


def ease_in_quad(t: float) -> float:
    return t * t


def ease_out_quad(t: float) -> float:
    return 1 - (1 - t) * (1 - t)


def ease_in_out_quad(t: float) -> float:
    if t < 0.5:
        return 2 * t * t
    return 1 - (-2 * t + 2) ** 2 / 2


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def ease_in_out_sine(t: float) -> float:
    return -(math.cos(math.pi * t) - 1) / 2


EaseFunc = Callable[[float], float]
EaseSpec = Union[str, EaseFunc, None]

_EASINGS: Dict[str, EaseFunc] = {
    "linear": ease_linear,
    "in_quad": ease_in_quad,
    "out_quad": ease_out_quad,
    "in_out_quad": ease_in_out_quad,
    "out_cubic": ease_out_cubic,
    "in_out_sine": ease_in_out_sine,
}

DEFAULT_EASE: EaseFunc = ease_in_out_quad


def register_ease(name: str, func: EaseFunc) -> None:
    _EASINGS[name] = func


def get_ease(spec: EaseSpec) -> EaseFunc:
    """Resolve a step's easing field: None, a curve name, or a callable."""
    if spec is None:
        return DEFAULT_EASE
    if callable(spec):
        return spec
    try:
        return _EASINGS[spec]
    except KeyError as e:
        known = ", ".join(sorted(_EASINGS.keys()))
        raise KeyError(f"Unknown easing '{spec}'. Known: {known}") from e


def is_known_ease(spec: EaseSpec) -> bool:
    return spec is None or callable(spec) or (isinstance(spec, str) and spec in _EASINGS)


def lerp(a: float, b: float, t: float, ease: Optional[EaseFunc] = None) -> float:
    if ease is not None:
        t = ease(t)
    return a + (b - a) * t
