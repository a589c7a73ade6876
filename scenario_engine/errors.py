from __future__ import annotations
from typing import Iterable


class ScenarioError(Exception):
    """Base class for everything the scenario engine raises on purpose."""


class ScenarioCompileError(ScenarioError, ValueError):
    """
    One aggregated failure for a scenario that did not validate.

    errors holds every problem found, deduplicated, in discovery order.
    """

    def __init__(self, errors: Iterable[str]):
        self.errors: tuple[str, ...] = tuple(errors)
        super().__init__("\n".join(self.errors) or "Scenario failed to compile")


class ScenarioRuntimeError(ScenarioError, RuntimeError):
    """Fatal to the current run: bad jump target or unknown value target."""
