from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence

from scenario_engine.debug_logger import log
from scenario_engine.steps.tween import get_ease, lerp


@dataclass(frozen=True)
class AnimationRequest:
    """One entry of a parallel batch: animate target to value over duration ms."""

    target: str
    value: Any
    duration: float
    easing: Any = None
    native: Optional[bool] = None


class ValueDriver(Protocol):
    """Owns one animatable value per named target."""

    def __contains__(self, target: object) -> bool: ...
    def get(self, target: str) -> Any: ...
    def set(self, target: str, value: Any) -> None: ...
    async def animate_to(
        self,
        target: str,
        value: Any,
        duration: float,
        easing: Any = None,
        native: Optional[bool] = None,
    ) -> None: ...
    async def animate_many(self, requests: Sequence[AnimationRequest]) -> None: ...
    def snapshot(self) -> Dict[str, Any]: ...


def null_haptics() -> None:
    log("driver", "vibrate (no haptics attached)")


class AnimatedValue:
    """A single live value that can be set or tweened.

    Starting a new tween or calling set() supersedes the running tween,
    which then resolves on its next tick without touching the value.
    """

    def __init__(self, value: Any) -> None:
        self.value = value
        self._generation = 0

    def set(self, value: Any) -> None:
        self._generation += 1
        self.value = value

    async def animate_to(self, to: Any, duration_ms: float, easing: Any = None, frame_ms: float = 16.0) -> None:
        self._generation += 1
        generation = self._generation

        if duration_ms is None or duration_ms <= 0:
            self.value = to
            return

        ease = get_ease(easing)
        start = self.value
        loop = asyncio.get_running_loop()
        t0 = loop.time()

        while True:
            await asyncio.sleep(frame_ms / 1000.0)
            if generation != self._generation:
                return
            elapsed_ms = (loop.time() - t0) * 1000.0
            t = max(0.0, min(1.0, elapsed_ms / duration_ms))
            self.value = lerp(start, to, t, ease)
            if t >= 1.0:
                self.value = to
                return


class TweenValueDriver:
    """Reference ValueDriver: frame-ticked tweens on the running event loop."""

    def __init__(self, initial_values: Mapping[str, Any], *, frame_ms: float = 16.0) -> None:
        if frame_ms <= 0:
            raise ValueError(f"frame_ms must be > 0 (got {frame_ms!r})")
        self.frame_ms = frame_ms
        self._values: Dict[str, AnimatedValue] = {
            name: AnimatedValue(value) for name, value in initial_values.items()
        }

    def __contains__(self, target: object) -> bool:
        return target in self._values

    def _lookup(self, target: str) -> AnimatedValue:
        try:
            return self._values[target]
        except KeyError as e:
            known = ", ".join(sorted(self._values.keys()))
            raise KeyError(f"Unknown target '{target}'. Known: {known}") from e

    def get(self, target: str) -> Any:
        return self._lookup(target).value

    def set(self, target: str, value: Any) -> None:
        self._lookup(target).set(value)

    async def animate_to(
        self,
        target: str,
        value: Any,
        duration: float,
        easing: Any = None,
        native: Optional[bool] = None,
    ) -> None:
        # native is a renderer hint; tweens here always run on the loop
        log("driver", f"animate {target}: {self.get(target)!r} -> {value!r} over {duration}ms")
        await self._lookup(target).animate_to(value, duration, easing, self.frame_ms)

    async def animate_many(self, requests: Sequence[AnimationRequest]) -> None:
        await asyncio.gather(
            *(self.animate_to(r.target, r.value, r.duration, r.easing, r.native) for r in requests)
        )

    def snapshot(self) -> Dict[str, Any]:
        return {name: av.value for name, av in self._values.items()}
