# scenario_engine/router.py

from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple


EventHandler = Callable[[str, Dict[str, Any]], None]

# Topics an interpreter emits
STEP = "step"            # index, label, type
HOLD = "hold"            # index
RUN_START = "run.start"  # loop
RUN_END = "run.end"      # stopped
RESET = "reset"


class EventRouter:
    """
    Synchronous per-interpreter event bus.

    - Timeline displays subscribe to STEP to follow the cursor.
    - handler(topic, payload_dict) runs inline, inside the interpreter's
      task, so a handler may call stop() and have it seen at the next
      step boundary.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[EventHandler]] = defaultdict(list)

    def subscribe(self, topic: str, handler: EventHandler) -> Callable[[], None]:
        """Register a handler; returns a zero-arg function that unsubscribes it."""
        self._listeners[topic].append(handler)
        return lambda: self.unsubscribe(topic, handler)

    def unsubscribe(self, topic: str, handler: EventHandler) -> None:
        if topic in self._listeners:
            self._listeners[topic] = [
                h for h in self._listeners[topic] if h is not handler
            ]
            if not self._listeners[topic]:
                del self._listeners[topic]

    def listener_count(self, topic: str) -> int:
        return len(self._listeners.get(topic, ()))

    def emit(self, topic: str, **payload: Any) -> None:
        # snapshot: handlers may unsubscribe while we iterate
        for handler in list(self._listeners.get(topic, ())):
            handler(topic, dict(payload))


class TimelineFeed:
    """
    Read-only (index, label) stream for a timeline strip.

        feed = TimelineFeed(interp.step_labels)
        feed.attach(interp.events)
        ...
        feed.current_index, feed.history
    """

    def __init__(self, labels: Sequence[str], *, keep: Optional[int] = 256) -> None:
        self.labels: Tuple[str, ...] = tuple(labels)
        self.current_index: int = -1
        self.history: List[Tuple[int, str]] = []
        self._keep = keep
        self._detach: List[Callable[[], None]] = []

    def attach(self, router: EventRouter) -> None:
        self._detach.append(router.subscribe(STEP, self._on_step))
        self._detach.append(router.subscribe(RESET, self._on_reset))

    def detach(self) -> None:
        for undo in self._detach:
            undo()
        self._detach.clear()

    @property
    def current_label(self) -> Optional[str]:
        if 0 <= self.current_index < len(self.labels):
            return self.labels[self.current_index]
        return None

    def _on_step(self, topic: str, payload: Dict[str, Any]) -> None:
        self.current_index = payload["index"]
        self.history.append((payload["index"], payload["label"]))
        if self._keep is not None and len(self.history) > self._keep:
            del self.history[: len(self.history) - self._keep]

    def _on_reset(self, topic: str, payload: Dict[str, Any]) -> None:
        self.current_index = -1
