from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional


@dataclass
class ExecutionState:
    """
    Registers of one interpreter. Never shared between interpreters.

    return_address is a single slot, not a stack: a second goto before a
    resume overwrites the first continuation.
    """

    cursor: int = 0
    current_index: int = -1
    return_address: Optional[int] = None
    hold: Optional[asyncio.Future] = None
    stopped: bool = False
    vibrated: bool = False

    def begin_run(self) -> None:
        self.cursor = 0
        self.return_address = None
        self.vibrated = False

    def release_hold(self) -> bool:
        """Resolve and clear the pending hold. Returns False if none was pending."""
        pending, self.hold = self.hold, None
        if pending is None:
            return False
        if not pending.done():
            pending.set_result(None)
        return True
