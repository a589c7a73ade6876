from .compiler import BlockRegistry, CompiledProgram, compile_scenario
from .errors import ScenarioCompileError, ScenarioError, ScenarioRuntimeError
from .router import EventRouter, TimelineFeed
from .runtime import (
    ExecutionState,
    InterpreterConfig,
    ScenarioInterpreter,
    TweenValueDriver,
    ValueDriver,
    build_interpreter,
)
from .steps import *  # noqa: F401,F403
