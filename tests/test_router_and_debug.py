import logging

from scenario_engine import compile_scenario, debug_logger
from scenario_engine.debug_logger import ScenarioDebug
from scenario_engine.router import EventRouter
from scenario_engine.steps import label, move, use


def test_router_emits_in_registration_order():
    router = EventRouter()
    calls = []
    router.subscribe("step", lambda topic, payload: calls.append(("a", payload["index"])))
    router.subscribe("step", lambda topic, payload: calls.append(("b", payload["index"])))

    router.emit("step", index=3)

    assert calls == [("a", 3), ("b", 3)]


def test_router_unsubscribe_during_emit():
    router = EventRouter()
    calls = []

    def once(topic, payload):
        calls.append(topic)
        router.unsubscribe(topic, once)

    router.subscribe("hold", once)
    router.emit("hold")
    router.emit("hold")

    assert calls == ["hold"]


def test_category_gating(caplog):
    debug_logger.set_categories({"runtime"})
    try:
        with caplog.at_level(logging.DEBUG, logger="scenario_engine"):
            debug_logger.log("compile", "hidden")
            debug_logger.log("runtime", "shown")
            debug_logger.warn("compile", "always shown")
    finally:
        debug_logger.set_categories({"compile", "runtime", "driver"})

    assert "hidden" not in caplog.text
    assert "shown" in caplog.text
    assert "always shown" in caplog.text


def test_program_snapshot_lists_steps():
    program = compile_scenario(
        [label("start"), use("b")],
        blocks={"b": [move("x", 1, 10, "slide")]},
        initial_values={"x": 0},
    )
    text = ScenarioDebug().program_snapshot(program)

    assert "2 steps" in text
    assert "labels={'start': 0}" in text
    assert "block=b" in text


def test_subscribe_returns_unsubscriber():
    router = EventRouter()
    calls = []
    undo = router.subscribe("reset", lambda topic, payload: calls.append(topic))
    assert router.listener_count("reset") == 1

    undo()
    router.emit("reset")

    assert calls == []
    assert router.listener_count("reset") == 0


def test_timeline_feed_follows_steps_and_reset():
    from scenario_engine.router import TimelineFeed

    router = EventRouter()
    feed = TimelineFeed(["start", "move-1", "end"], keep=2)
    feed.attach(router)

    router.emit("step", index=0, label="start", type="label")
    router.emit("step", index=1, label="move-1", type="move")
    router.emit("step", index=2, label="end", type="label")

    assert feed.current_index == 2
    assert feed.current_label == "end"
    assert feed.history == [(1, "move-1"), (2, "end")]

    router.emit("reset")
    assert feed.current_index == -1
    assert feed.current_label is None

    feed.detach()
    router.emit("step", index=1, label="move-1", type="move")
    assert feed.current_index == -1
