from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Literal, Mapping, Optional, Sequence

from scenario_engine.compiler.compile import CompiledProgram, compile_scenario
from scenario_engine.debug_logger import log, warn
from scenario_engine.errors import ScenarioRuntimeError
from scenario_engine.router import HOLD, RESET, RUN_END, RUN_START, STEP, EventRouter
from scenario_engine.steps.spec import (
    Callback, Delay, Goto, IfJump, IfThen, Move, Parallel, Set, Step,
)

from .driver import AnimationRequest, TweenValueDriver, ValueDriver, null_haptics
from .resolve import resolve_condition, resolve_to, resolve_value
from .state import ExecutionState


JUMPED = "jumped"

VibrationMode = Literal["once", "always"]
RunMode = Literal["auto", "manual"]

StepHandler = Callable[[Any, int], Awaitable[Optional[str]]]


@dataclass
class InterpreterConfig:
    loop: bool = False
    vibration_mode: VibrationMode = "once"
    mode: RunMode = "auto"

    def __post_init__(self) -> None:
        if self.vibration_mode not in ("once", "always"):
            raise ValueError(f"vibration_mode must be 'once' or 'always' (got {self.vibration_mode!r})")
        if self.mode not in ("auto", "manual"):
            raise ValueError(f"mode must be 'auto' or 'manual' (got {self.mode!r})")


def jump_past(steps: Sequence[Step], start: int, open_type: str, end_types: Sequence[str]) -> int:
    """
    Index just past the construct closing the one opened at start.

    Nested open_type steps raise the depth; only the last of end_types
    closes a nested level. Returns len(steps) if nothing matches.
    """
    depth = 0
    closer = end_types[-1]
    for i in range(start + 1, len(steps)):
        kind = steps[i].type
        if kind == open_type:
            depth += 1
        elif kind == closer and depth > 0:
            depth -= 1
        elif kind in end_types and depth == 0:
            return i + 1
    return len(steps)


class ScenarioInterpreter:
    """
    Runs a CompiledProgram one step at a time.

    - auto mode: await start() drives the whole program (and loops if asked)
    - manual mode: every await next_step() runs exactly one step
    - hold steps wait until next_step() is called from outside
    - stop() is cooperative: the step in flight finishes first
    """

    def __init__(
        self,
        program: CompiledProgram,
        initial_values: Mapping[str, Any],
        *,
        callbacks: Optional[Mapping[str, Callable[..., Any]]] = None,
        config: Optional[InterpreterConfig] = None,
        driver: Optional[ValueDriver] = None,
        haptics: Optional[Callable[[], Any]] = None,
    ) -> None:
        if initial_values is None:
            raise ValueError('Missing required "initial_values"')

        self.program = program
        self.initial_values: Dict[str, Any] = dict(initial_values)
        self.callbacks: Dict[str, Callable[..., Any]] = dict(callbacks or {})
        self.config = config or InterpreterConfig()
        self.driver: ValueDriver = driver if driver is not None else TweenValueDriver(self.initial_values)
        self.haptics = haptics or null_haptics
        self.events = EventRouter()
        self.state = ExecutionState()

        self._step_labels = program.step_labels()
        self._run_token = 0

        # Handlers dispatch based on step type
        self._handlers: Dict[str, StepHandler] = {
            "move": self._run_move,
            "parallel": self._run_parallel,
            "delay": self._run_delay,
            "vibrate": self._run_vibrate,
            "callback": self._run_callback,
            "hold": self._run_hold,
            "label": self._run_marker,
            "comment": self._run_marker,
            "ifEnd": self._run_marker,
            "goto": self._run_goto,
            "resume": self._run_resume,
            "set": self._run_set,
            "stop": self._run_stop,
            "ifJump": self._run_if_jump,
            "ifThen": self._run_if_then,
            "ifElse": self._run_if_else,
        }

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def current_index(self) -> int:
        return self.state.current_index

    @property
    def step_labels(self) -> List[str]:
        return list(self._step_labels)

    @property
    def values(self) -> Dict[str, Any]:
        return self.driver.snapshot()

    @property
    def is_holding(self) -> bool:
        return self.state.hold is not None

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------
    async def start(self) -> None:
        """Run the program in auto mode. Does nothing in manual mode."""
        if self.config.mode == "manual":
            return
        await self._run_auto()

    def stop(self) -> None:
        self.reset()
        self.state.stopped = True
        log("runtime", "stop()")

    def reset(self) -> None:
        """
        Fresh registers, values snapped back to their initial values.

        A run parked on a hold is woken; it carries on from the fresh
        state's cursor (or exits, after stop()).
        """
        log("runtime", "reset()")
        previous, self.state = self.state, ExecutionState()
        for name, value in self.initial_values.items():
            if name in self.driver:
                self.driver.set(name, value)
        previous.release_hold()
        self.events.emit(RESET)

    async def next_step(self, label: Optional[str] = None) -> None:
        state = self.state

        if label is not None:
            state.cursor = self._label_index(label)

        # If parked on a hold, resuming it is all this call does.
        if state.release_hold():
            log("runtime", "hold released by next_step()")
            return

        if state.stopped:
            return
        if not 0 <= state.cursor < len(self.program.steps):
            return

        index = state.cursor
        result = await self.run_step(self.program.steps[index], index)
        if self.state is not state:
            return
        if result != JUMPED:
            state.cursor += 1
        if state.cursor >= len(self.program.steps):
            state.cursor = 0

    # ------------------------------------------------------------------
    # Driving loop
    # ------------------------------------------------------------------
    async def _run_auto(self) -> None:
        self._run_token += 1
        token = self._run_token
        # Each run owns its registers; an older run still in flight keeps
        # writing to its own state and exits at its next step boundary.
        previous, self.state = self.state, ExecutionState()
        previous.release_hold()
        self.events.emit(RUN_START, loop=self.config.loop)
        try:
            while True:
                completed = await self._run_once(token)
                if not (completed and self.config.loop and self.program.steps):
                    break
        finally:
            self.events.emit(RUN_END, stopped=self.state.stopped)

    async def _run_once(self, token: int) -> bool:
        """One pass over the program. True when it ran off the end unstopped."""
        steps = self.program.steps
        self.state.begin_run()

        while True:
            # Step boundary: let stop()/next_step() from other tasks land.
            await asyncio.sleep(0)
            state = self.state
            if token != self._run_token or state.stopped:
                return False
            if state.cursor >= len(steps):
                return True

            index = state.cursor
            result = await self.run_step(steps[index], index)

            if self.state is not state:
                # reset() while the step was in flight: continue from the fresh state
                continue
            if result == JUMPED:
                continue
            state.cursor += 1

    async def run_step(self, step: Step, index: int) -> Optional[str]:
        self.state.current_index = index
        self.events.emit(STEP, index=index, label=self._step_labels[index], type=step.type)

        handler = self._handlers.get(step.type)
        if handler is None:
            warn("runtime", f"Unknown step type {step.type!r} at step {index}, skipping")
            return None

        log("runtime", f"step {index}: {step.type}")
        return await handler(step, index)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _label_index(self, name: Any) -> int:
        index = self.program.labels.get(name) if isinstance(name, str) else None
        if index is None:
            raise ScenarioRuntimeError(f"Label '{name}' not found")
        return index

    def _require_target(self, target: Any) -> None:
        if target not in self.driver:
            raise ScenarioRuntimeError(f"Unknown target: {target!r}")

    def _jump(self, index: int, state: Optional[ExecutionState] = None) -> str:
        if state is None:
            state = self.state
        state.cursor = index
        return JUMPED

    # ------------------------------------------------------------------
    # Step handlers
    # ------------------------------------------------------------------
    async def _run_move(self, step: Move, index: int) -> None:
        self._require_target(step.target)
        to = await resolve_to(step.to, partial(self.driver.get, step.target), self.callbacks)
        duration = await resolve_value(step.duration, self.callbacks)
        await self.driver.animate_to(step.target, to, duration, step.easing, step.native)

    async def _run_parallel(self, step: Parallel, index: int) -> None:
        for t in step.targets:
            self._require_target(t.target)
        targets = await asyncio.gather(
            *(resolve_to(t.to, partial(self.driver.get, t.target), self.callbacks) for t in step.targets)
        )
        durations = await asyncio.gather(*(resolve_value(t.duration, self.callbacks) for t in step.targets))
        requests = [
            AnimationRequest(t.target, to, duration, t.easing, t.native)
            for t, to, duration in zip(step.targets, targets, durations)
        ]
        await self.driver.animate_many(requests)

    async def _run_delay(self, step: Delay, index: int) -> None:
        duration = await resolve_value(step.duration, self.callbacks)
        await asyncio.sleep(max(0.0, float(duration)) / 1000.0)

    async def _run_vibrate(self, step: Step, index: int) -> None:
        mode = self.config.vibration_mode
        if mode == "always" or not self.state.vibrated:
            if mode == "once":
                self.state.vibrated = True
            result = self.haptics()
            if inspect.isawaitable(result):
                await result

    async def _run_callback(self, step: Callback, index: int) -> None:
        fn = self.callbacks.get(step.name)
        if fn is None:
            warn("runtime", f"Callback {step.name!r} not found")
            return
        # sync callbacks return at once; async ones pause the timeline until done
        result = fn(step.value) if step.has_value else fn()
        if inspect.isawaitable(result):
            await result

    async def _run_hold(self, step: Step, index: int) -> None:
        future = asyncio.get_running_loop().create_future()
        self.state.hold = future
        self.events.emit(HOLD, index=index)
        await future

    async def _run_marker(self, step: Step, index: int) -> None:
        return None

    async def _run_goto(self, step: Goto, index: int) -> str:
        target = self._label_index(step.label)
        self.state.return_address = index + 1
        log("runtime", f"goto step {target} (return to {index + 1})")
        return self._jump(target)

    async def _run_resume(self, step: Step, index: int) -> Optional[str]:
        target = self.state.return_address
        if target is None:
            warn("runtime", "resume() called without previous goto()")
            return None
        self.state.return_address = None
        log("runtime", f"resume to step {target}")
        return self._jump(target)

    async def _run_set(self, step: Set, index: int) -> None:
        value = await resolve_value(step.value, self.callbacks)
        self._require_target(step.target)
        self.driver.set(step.target, value)

    async def _run_stop(self, step: Step, index: int) -> None:
        self.state.stopped = True
        log("runtime", f"stopped by 'stop' step {index}")

    async def _run_if_jump(self, step: IfJump, index: int) -> Optional[str]:
        state = self.state
        result = await resolve_condition(step.condition, self.callbacks)
        if result is None:
            return None
        target_label = step.label_true if result else step.label_false
        if not target_label:
            return None
        return self._jump(self._label_index(target_label), state)

    async def _run_if_then(self, step: IfThen, index: int) -> Optional[str]:
        state = self.state
        result = await resolve_condition(step.condition, self.callbacks)
        if result is None or result:
            return None
        return self._jump(jump_past(self.program.steps, index, "ifThen", ("ifElse", "ifEnd")), state)

    async def _run_if_else(self, step: Step, index: int) -> str:
        return self._jump(jump_past(self.program.steps, index, "ifThen", ("ifEnd",)))


def build_interpreter(
    scenario: Sequence[Any],
    initial_values: Mapping[str, Any],
    *,
    blocks: Any = None,
    callbacks: Optional[Mapping[str, Callable[..., Any]]] = None,
    loop: bool = False,
    vibration_mode: VibrationMode = "once",
    mode: RunMode = "auto",
    driver: Optional[ValueDriver] = None,
    haptics: Optional[Callable[[], Any]] = None,
) -> ScenarioInterpreter:
    """Compile (raising on any error) and wrap the program in an interpreter."""
    if initial_values is None:
        raise ValueError('Missing required "initial_values"')
    program = compile_scenario(
        scenario,
        blocks=blocks,
        callbacks=callbacks,
        initial_values=initial_values,
    )
    return ScenarioInterpreter(
        program,
        initial_values,
        callbacks=callbacks,
        config=InterpreterConfig(loop=loop, vibration_mode=vibration_mode, mode=mode),
        driver=driver,
        haptics=haptics,
    )
