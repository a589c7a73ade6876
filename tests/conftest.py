from __future__ import annotations

from pathlib import Path
import sys
from typing import Any, Dict, List, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scenario_engine.runtime.driver import AnimationRequest  # noqa: E402


class InstantDriver:
    """ValueDriver that finishes every animation immediately and records it."""

    def __init__(self, initial_values: Dict[str, Any]) -> None:
        self._values = dict(initial_values)
        self.animations: List[tuple] = []
        self.batches: List[List[AnimationRequest]] = []

    def __contains__(self, target: object) -> bool:
        return target in self._values

    def get(self, target: str) -> Any:
        return self._values[target]

    def set(self, target: str, value: Any) -> None:
        self._values[target] = value

    async def animate_to(self, target, value, duration, easing=None, native: Optional[bool] = None) -> None:
        self.animations.append((target, value, duration))
        self._values[target] = value

    async def animate_many(self, requests: Sequence[AnimationRequest]) -> None:
        self.batches.append(list(requests))
        for r in requests:
            await self.animate_to(r.target, r.value, r.duration, r.easing, r.native)

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._values)


class HapticsRecorder:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1


@pytest.fixture
def make_driver():
    return InstantDriver


@pytest.fixture
def haptics() -> HapticsRecorder:
    return HapticsRecorder()


def visited(interp) -> List[int]:
    """Subscribe to an interpreter's step stream and return the live list of indices."""
    seen: List[int] = []
    interp.events.subscribe("step", lambda topic, payload: seen.append(payload["index"]))
    return seen
