from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from scenario_engine.steps.spec import Callback, Goto, IfElse, IfEnd, IfJump, IfThen, Move, Parallel, Set, Step
from scenario_engine.steps.tween import is_known_ease


def _moves(step: Step) -> List[Move]:
    if isinstance(step, Move):
        return [step]
    if isinstance(step, Parallel) and isinstance(step.targets, (list, tuple)):
        return [t for t in step.targets if isinstance(t, Move)]
    return []


def _declared_targets(step: Step) -> List[Any]:
    if isinstance(step, Set):
        return [step.target]
    return [m.target for m in _moves(step)]


def _check_label_ref(
    issues: list[str],
    where: str,
    name: Any,
    labels: Mapping[str, int],
    block_labels: Mapping[str, str],
) -> None:
    if not isinstance(name, str) or not name:
        issues.append(f"{where}: jump target label missing/invalid (got {name!r})")
        return
    if name in labels:
        return
    if name in block_labels:
        issues.append(
            f"{where}: Label '{name}' is defined inside block '{block_labels[name]}' "
            f"and is not addressable"
        )
        return
    issues.append(f"{where}: Label '{name}' not found")


def validate_references(
    steps: Sequence[Step],
    labels: Mapping[str, int],
    *,
    initial_values: Optional[Mapping[str, Any]] = None,
    callbacks: Optional[Mapping[str, Any]] = None,
    block_labels: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """
    Check that everything a flat program names actually exists.

    - value targets of move / set / parallel entries -> initial_values
    - easing names of move / parallel entries -> registered curves
    - callback names -> callbacks
    - goto / ifJump destinations -> top-level labels
    """
    issues: List[str] = []
    initial_values = initial_values or {}
    callbacks = callbacks or {}
    block_labels = block_labels or {}

    for i, step in enumerate(steps):
        where = f"step {i} ({step.type})"

        # ---- Value targets --------------------------------------------
        for target in _declared_targets(step):
            if not isinstance(target, str) or not target:
                issues.append(f"{where}: target must be a non-empty string (got {target!r})")
            elif target not in initial_values:
                issues.append(f"{where}: Missing initial value for target {target!r}")
        for m in _moves(step):
            if not is_known_ease(m.easing):
                issues.append(f"{where}: Unknown easing {m.easing!r} for target {m.target!r}")

        # ---- Side-effect table ----------------------------------------
        if isinstance(step, Callback) and (not isinstance(step.name, str) or step.name not in callbacks):
            issues.append(f"{where}: Callback {step.name!r} not found")

        # ---- Jump destinations ----------------------------------------
        if isinstance(step, Goto):
            _check_label_ref(issues, where, step.label, labels, block_labels)
        elif isinstance(step, IfJump):
            _check_label_ref(issues, where, step.label_true, labels, block_labels)
            if step.label_false is not None:
                _check_label_ref(issues, where, step.label_false, labels, block_labels)

    return issues


def validate_conditionals(steps: Sequence[Step]) -> List[str]:
    """
    Check that ifThen / ifElse / ifEnd nest like brackets.

    Each open frame is [index of ifThen, index of its ifElse or None].
    """
    issues: List[str] = []
    stack: List[List[Optional[int]]] = []

    for i, step in enumerate(steps):
        if isinstance(step, IfThen):
            stack.append([i, None])
        elif isinstance(step, IfElse):
            if not stack:
                issues.append(f'"ifElse" at step {i} has no matching "ifThen"')
            elif stack[-1][1] is not None:
                issues.append(
                    f'"ifElse" at step {i} reuses the else branch of "ifThen" at step {stack[-1][0]} '
                    f'(first "ifElse" at step {stack[-1][1]})'
                )
            else:
                stack[-1][1] = i
        elif isinstance(step, IfEnd):
            if not stack:
                issues.append(f'"ifEnd" at step {i} has no matching "ifThen"')
            else:
                stack.pop()

    for opened, _else in stack:
        issues.append(f'Unclosed "ifThen" at step {opened}')

    return issues
