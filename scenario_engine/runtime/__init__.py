from .driver import AnimatedValue, AnimationRequest, TweenValueDriver, ValueDriver, null_haptics
from .interpreter import InterpreterConfig, ScenarioInterpreter, build_interpreter, jump_past, JUMPED
from .state import ExecutionState
