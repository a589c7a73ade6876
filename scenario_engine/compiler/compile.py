from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from scenario_engine.debug_logger import ScenarioDebug, log
from scenario_engine.errors import ScenarioCompileError
from scenario_engine.steps.spec import IfJump, Label, Move, Parallel, Step, Use, coerce_move, step_from_mapping

from .blocks import as_registry, BlockRegistry
from .validate import validate_conditionals, validate_references


@dataclass(frozen=True)
class CompiledProgram:
    """
    A flat, linear program: blocks inlined, labels resolved.

    labels only holds top-level labels; labels defined inside blocks stay in
    steps for display but cannot be jumped to. Treat instances as read-only;
    several interpreters may share one.
    """

    steps: Tuple[Step, ...]
    labels: Dict[str, int] = field(default_factory=dict)
    errors: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def ok(self) -> bool:
        return not self.errors

    def display_label(self, index: int) -> str:
        step = self.steps[index]
        return step.display_name or f"{step.type}-{index}"

    def step_labels(self) -> List[str]:
        return [self.display_label(i) for i in range(len(self.steps))]


class _Flattener:
    """Depth-first expansion of use() steps with error accumulation."""

    def __init__(self, registry: BlockRegistry) -> None:
        self.registry = registry
        self.steps: List[Step] = []
        self.labels: Dict[str, int] = {}
        self.block_labels: Dict[str, str] = {}
        self.errors: List[str] = []
        self._seen_labels: set[str] = set()
        self._block_stack: List[str] = []

    def flatten(self, items: Sequence[Any], source_block: Optional[str], where: str) -> None:
        for i, raw in enumerate(items):
            path = f"{where}[{i}]"
            step = self._coerce(raw, path)
            if step is None:
                continue

            if isinstance(step, Use):
                self._expand(step, path)
                continue

            if isinstance(step, Label):
                self._register_label(step, source_block, path)
            elif isinstance(step, IfJump):
                self._check_if_jump(step, path)
            elif isinstance(step, Parallel):
                step = self._check_parallel(step, path)

            if source_block is not None:
                step = dataclasses.replace(step, source_block=source_block)
            self.steps.append(step)

    # ------------------------------------------------------------------
    def _coerce(self, raw: Any, path: str) -> Optional[Step]:
        if isinstance(raw, Step):
            return raw
        if isinstance(raw, Mapping):
            try:
                return step_from_mapping(raw)
            except (TypeError, ValueError) as e:
                self.errors.append(f"Invalid step in scenario at {path}: {e}")
                return None
        self.errors.append(f"Invalid step in scenario at {path}: {raw!r}")
        return None

    def _expand(self, step: Use, path: str) -> None:
        name = step.block
        block = self.registry.find(name)
        if block is None:
            self.errors.append(f"Block '{name}' not found (at {path})")
            return
        if name in self._block_stack:
            chain = " -> ".join([*self._block_stack, name])
            self.errors.append(f"Block '{name}' uses itself recursively ({chain})")
            return
        if isinstance(block, (str, bytes)) or not isinstance(block, (list, tuple)):
            self.errors.append(f"Block '{name}' must be a sequence of steps")
            return

        log("compile", f"expanding block '{name}' ({len(block)} steps) at {path}")
        self._block_stack.append(name)
        try:
            self.flatten(block, name, name)
        finally:
            self._block_stack.pop()

    def _register_label(self, step: Label, source_block: Optional[str], path: str) -> None:
        name = step.label
        if not isinstance(name, str) or not name:
            self.errors.append(f"Label must have a string name (at {path}, got {name!r})")
            return
        if name in self._seen_labels:
            self.errors.append(f"Duplicate label '{name}' found (at {path})")
            return
        self._seen_labels.add(name)

        if source_block is None:
            self.labels[name] = len(self.steps)
        else:
            self.block_labels[name] = source_block

    def _check_if_jump(self, step: IfJump, path: str) -> None:
        if not (callable(step.condition) or isinstance(step.condition, str)):
            self.errors.append(
                f"ifJump condition must be a function or a callback name (at {path}, got {step.condition!r})"
            )
        if not isinstance(step.label_true, str) or not step.label_true:
            self.errors.append(f"ifJump labelTrue must be a non-empty string (at {path}, got {step.label_true!r})")
        if step.label_false is not None and not isinstance(step.label_false, str):
            self.errors.append(f"ifJump labelFalse must be a string (at {path}, got {step.label_false!r})")

    def _check_parallel(self, step: Parallel, path: str) -> Parallel:
        targets = step.targets
        if isinstance(targets, (str, bytes)) or not isinstance(targets, (list, tuple)) or not targets:
            self.errors.append(f"parallel targets must be a non-empty sequence (at {path})")
            return step

        coerced = tuple(coerce_move(t) for t in targets)
        for k, entry in enumerate(coerced):
            if not isinstance(entry, Move) or not isinstance(entry.target, str):
                self.errors.append(
                    f"parallel targets[{k}] must be a move with a string target (at {path}, got {entry!r})"
                )
        return dataclasses.replace(step, targets=coerced)


def _dedupe(errors: Sequence[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(errors))


def compile_scenario(
    scenario: Sequence[Any],
    *,
    blocks: Any = None,
    callbacks: Optional[Mapping[str, Any]] = None,
    initial_values: Optional[Mapping[str, Any]] = None,
    raise_errors: bool = True,
) -> CompiledProgram:
    """
    Flatten a scenario into a CompiledProgram and validate it.

    Every problem is collected before anything is raised. With
    raise_errors=False the (best-effort) program is returned with its
    errors attached instead.
    """
    flattener = _Flattener(as_registry(blocks))

    if isinstance(scenario, (str, bytes)) or not isinstance(scenario, (list, tuple)):
        flattener.errors.append(f"Scenario must be a sequence of steps (got {type(scenario).__name__})")
    else:
        flattener.flatten(scenario, None, "scenario")

    steps = tuple(flattener.steps)
    errors: List[str] = list(flattener.errors)
    errors += validate_references(
        steps,
        flattener.labels,
        initial_values=initial_values,
        callbacks=callbacks,
        block_labels=flattener.block_labels,
    )
    errors += validate_conditionals(steps)

    program = CompiledProgram(steps=steps, labels=dict(flattener.labels), errors=_dedupe(errors))
    ScenarioDebug().program_snapshot(program)

    if program.errors:
        log("compile", f"{len(program.errors)} error(s): " + "; ".join(program.errors))
        if raise_errors:
            raise ScenarioCompileError(program.errors)

    return program
