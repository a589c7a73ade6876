from __future__ import annotations
import dataclasses
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Literal, Mapping, Optional, Tuple, Type


StepType = Literal[
    "move",
    "delay",
    "parallel",
    "vibrate",
    "callback",
    "hold",
    "label",
    "comment",
    "use",
    "goto",
    "set",
    "resume",
    "stop",
    "ifJump",
    "ifThen",
    "ifElse",
    "ifEnd",
]


class _Unset:
    """Marker for 'field not given' where None is a legitimate value."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class Relative:
    """
    A move target relative to the live value when the step runs.

    sign is +1 for inc(v), -1 for dec(v). value may itself be dynamic.
    """

    sign: int
    value: Any


# ----------------------------------------------------------------------
# Steps
# ----------------------------------------------------------------------
@dataclass(frozen=True, kw_only=True)
class Step:
    """One instruction in a scenario.

    label is a display tag (and the name itself for Label steps).
    source_block is filled by the compiler for steps inlined from a block.
    """

    type: ClassVar[str] = ""

    label: Optional[str] = None
    source_block: Optional[str] = None

    @property
    def display_name(self) -> Optional[str]:
        return self.label or getattr(self, "name", None) or None


@dataclass(frozen=True)
class Move(Step):
    type: ClassVar[str] = "move"

    target: str
    to: Any
    duration: Any
    easing: Any = None
    native: Optional[bool] = None


@dataclass(frozen=True)
class Delay(Step):
    type: ClassVar[str] = "delay"

    duration: Any


@dataclass(frozen=True)
class Parallel(Step):
    type: ClassVar[str] = "parallel"

    targets: Tuple[Move, ...]


@dataclass(frozen=True)
class Vibrate(Step):
    type: ClassVar[str] = "vibrate"


@dataclass(frozen=True)
class Callback(Step):
    type: ClassVar[str] = "callback"

    name: str
    value: Any = UNSET

    @property
    def has_value(self) -> bool:
        return self.value is not UNSET


@dataclass(frozen=True)
class Hold(Step):
    type: ClassVar[str] = "hold"


@dataclass(frozen=True)
class Label(Step):
    type: ClassVar[str] = "label"


@dataclass(frozen=True)
class Comment(Step):
    type: ClassVar[str] = "comment"

    comment: str = ""


@dataclass(frozen=True)
class Use(Step):
    type: ClassVar[str] = "use"

    block: str


@dataclass(frozen=True)
class Goto(Step):
    """Jump to a top-level label. Here `label` names the destination."""

    type: ClassVar[str] = "goto"


@dataclass(frozen=True)
class Set(Step):
    type: ClassVar[str] = "set"

    target: str
    value: Any


@dataclass(frozen=True)
class Resume(Step):
    type: ClassVar[str] = "resume"


@dataclass(frozen=True)
class Stop(Step):
    type: ClassVar[str] = "stop"


@dataclass(frozen=True)
class IfJump(Step):
    type: ClassVar[str] = "ifJump"

    condition: Any
    label_true: str
    label_false: Optional[str] = None


@dataclass(frozen=True)
class IfThen(Step):
    type: ClassVar[str] = "ifThen"

    condition: Any


@dataclass(frozen=True)
class IfElse(Step):
    type: ClassVar[str] = "ifElse"


@dataclass(frozen=True)
class IfEnd(Step):
    type: ClassVar[str] = "ifEnd"


STEP_TYPES: Dict[str, Type[Step]] = {
    cls.type: cls
    for cls in (
        Move, Delay, Parallel, Vibrate, Callback, Hold, Label, Comment, Use,
        Goto, Set, Resume, Stop, IfJump, IfThen, IfElse, IfEnd,
    )
}

# Authoring keys as written in JSON/JS scenarios -> dataclass field names.
_KEY_ALIASES = {
    "labelTrue": "label_true",
    "labelFalse": "label_false",
    "__sourceBlock": "source_block",
    "sourceBlock": "source_block",
}


def step_from_mapping(data: Mapping[str, Any]) -> Step:
    """
    Build a Step dataclass from a plain mapping like {"type": "move", ...}.

    Raises ValueError for an unknown type and TypeError for missing or
    unexpected fields.
    """
    step_type = data.get("type")
    cls = STEP_TYPES.get(step_type) if isinstance(step_type, str) else None
    if cls is None:
        raise ValueError(f"Unknown step type {step_type!r}")

    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        if key == "type":
            continue
        kwargs[_KEY_ALIASES.get(key, key)] = value

    allowed = {f.name for f in dataclasses.fields(cls)}
    unexpected = sorted(set(kwargs) - allowed)
    if unexpected:
        raise TypeError(f"unexpected field(s) {', '.join(unexpected)}")

    if cls is Parallel and isinstance(kwargs.get("targets"), (list, tuple)):
        kwargs["targets"] = tuple(coerce_move(t) for t in kwargs["targets"])

    return cls(**kwargs)


def coerce_move(entry: Any) -> Any:
    # Malformed entries are passed through untouched; the compiler reports them.
    if isinstance(entry, Mapping):
        payload = {k: v for k, v in entry.items() if k != "type"}
        if entry.get("type", "move") != "move":
            return entry
        try:
            return step_from_mapping({"type": "move", **payload})
        except (TypeError, ValueError):
            return entry
    return entry
