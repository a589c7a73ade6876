from .spec import (
    UNSET, Relative, Step, StepType, STEP_TYPES, step_from_mapping,
    Move, Delay, Parallel, Vibrate, Callback, Hold, Label, Comment, Use,
    Goto, Set, Resume, Stop, IfJump, IfThen, IfElse, IfEnd,
)
from .builders import *  # noqa: F401,F403
from .builders import __all__ as _builder_names
from .tween import get_ease, register_ease, EaseFunc

__all__ = [
    "UNSET", "Relative", "Step", "StepType", "STEP_TYPES", "step_from_mapping",
    "Move", "Delay", "Parallel", "Vibrate", "Callback", "Hold", "Label",
    "Comment", "Use", "Goto", "Set", "Resume", "Stop", "IfJump", "IfThen",
    "IfElse", "IfEnd", "get_ease", "register_ease", "EaseFunc",
    *_builder_names,
]
