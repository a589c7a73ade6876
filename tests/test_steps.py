import dataclasses

import pytest

from scenario_engine.steps import (
    UNSET, Callback, Goto, IfJump, Move, Parallel, Relative, Set, callback, dec,
    define_scenario, goto, if_jump, inc, label, move, parallel, set_, step_from_mapping,
)
from scenario_engine.steps.tween import ease_in_out_quad, ease_linear, get_ease, lerp, register_ease


def test_move_builder_fields():
    step = move("x", 150, 400, "slide", easing="out_quad", native=False)
    assert step == Move("x", 150, 400, easing="out_quad", native=False, label="slide")
    assert step.type == "move"
    assert step.source_block is None


def test_steps_are_immutable():
    step = move("x", 1, 10)
    with pytest.raises(dataclasses.FrozenInstanceError):
        step.to = 2


def test_relative_wrappers():
    assert inc(50) == Relative(1, 50)
    assert dec(30) == Relative(-1, 30)


def test_callback_value_is_optional():
    assert callback("ping").value is UNSET
    assert not callback("ping").has_value
    assert callback("ping", None).has_value
    assert callback("ping", 0).value == 0


def test_goto_and_label_use_the_label_field():
    assert goto("start") == Goto(label="start")
    assert label("start").label == "start"


def test_if_jump_optional_false_label():
    assert if_jump("cond", "yes") == IfJump("cond", "yes", None)
    assert if_jump("cond", "yes", "no").label_false == "no"


def test_set_alias():
    assert set_("x", 1) == Set("x", 1)


def test_parallel_freezes_targets():
    step = parallel([move("x", 1, 10), move("y", 2, 20)], "both")
    assert isinstance(step.targets, tuple)
    assert step.label == "both"


def test_define_scenario_rejects_non_sequences():
    assert define_scenario([label("a")]) == (label("a"),)
    with pytest.raises(TypeError):
        define_scenario("label('a')")
    with pytest.raises(TypeError):
        define_scenario({"type": "label"})


def test_step_from_mapping_camel_case_and_nested_moves():
    step = step_from_mapping({"type": "ifJump", "condition": "c", "labelTrue": "a", "labelFalse": "b"})
    assert step == IfJump("c", "a", "b")

    step = step_from_mapping({"type": "parallel", "targets": [{"target": "x", "to": 1, "duration": 5}]})
    assert step == Parallel((Move("x", 1, 5),))

    step = step_from_mapping({"type": "callback", "name": "ping"})
    assert step == Callback("ping")


def test_step_from_mapping_errors():
    with pytest.raises(ValueError, match="Unknown step type"):
        step_from_mapping({"type": "warp"})
    with pytest.raises(TypeError, match="unexpected field"):
        step_from_mapping({"type": "delay", "duration": 1, "speed": 3})
    with pytest.raises(TypeError):
        step_from_mapping({"type": "move", "target": "x"})


def test_easing_lookup():
    assert get_ease(None) is ease_in_out_quad
    assert get_ease("linear") is ease_linear
    assert get_ease(abs) is abs
    with pytest.raises(KeyError, match="Unknown easing 'wobble'"):
        get_ease("wobble")

    register_ease("step_half", lambda t: 0.0 if t < 0.5 else 1.0)
    assert get_ease("step_half")(0.7) == 1.0


def test_lerp_with_ease():
    assert lerp(0, 10, 0.5) == 5
    assert lerp(0, 10, 0.5, ease_in_out_quad) == 5
    assert lerp(0, 10, 1.0, get_ease("out_cubic")) == 10
