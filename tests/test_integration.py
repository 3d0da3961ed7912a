"""End-to-end tests: FiniteStateMachine driving the transitions engine."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pytest

from fsm_builder import FiniteStateMachine, FSMConfig, IllegalTransitionError


def _recorder():
    calls = []

    def record(label):
        return lambda event: calls.append(label)

    return calls, record


def _pipeline(record=None, config=None):
    record = record or (lambda label: None)
    return (
        FiniteStateMachine(config=config)
        .add_state("idle", on_leave=record("leave-idle"))
        .add_state("running", on_enter=record("enter-running"), on_leave=record("leave-running"))
        .add_state("done", on_enter=record("enter-done"))
        .set_init_state("idle")
        .add_transition("idle", "running", on_after=record("after-start"), on_before=record("before-start"))
        .add_transition("running", "done", on_after=record("after-finish"))
    )


def test_pipeline_scenario():
    """idle -> running -> done, with an illegal jump and a self-transition."""
    fsm = _pipeline().start()
    assert fsm.current() == "idle"

    with pytest.raises(IllegalTransitionError):
        fsm.go("done")
    assert fsm.current() == "idle"

    fsm.go("running")
    assert fsm.current() == "running"

    fsm.go("running")
    assert fsm.current() == "running"

    fsm.go("done")
    assert fsm.current() == "done"


def test_callback_order():
    """before, leave + global leave, enter + global enter, after."""
    calls, record = _recorder()
    fsm = _pipeline(record)
    fsm.on_exit_state(lambda e: calls.append(f"any-leave {e.source}"))
    fsm.on_enter_state(lambda e: calls.append(f"any-enter {e.dest}"))
    fsm.start()

    fsm.go("running")

    assert calls == [
        "before-start",
        "leave-idle",
        "any-leave idle",
        "enter-running",
        "any-enter running",
        "after-start",
    ]


def test_state_visible_to_enter_callback():
    """The state has already changed when enter callbacks run."""
    seen = []
    fsm = (
        FiniteStateMachine()
        .add_state("a", on_leave=lambda e: seen.append(("leave", fsm.current())))
        .add_state("b", on_enter=lambda e: seen.append(("enter", fsm.current())))
        .set_init_state("a")
        .add_transition("a", "b")
        .start()
    )
    fsm.go("b")
    assert seen == [("leave", "a"), ("enter", "b")]


def test_self_transition_fires_nothing():
    """go() to the current state invokes no callback or listener."""
    calls, record = _recorder()
    fsm = _pipeline(record)
    fsm.on_enter_state(lambda e: calls.append("any-enter"))
    fsm.on_exit_state(lambda e: calls.append("any-leave"))
    fsm.add_error_handler(lambda *args: calls.append("error"))
    fsm.start()
    fsm.go("running")
    calls.clear()

    assert fsm.go("running") is fsm

    assert calls == []
    assert fsm.current() == "running"


def test_global_listeners_fire_in_registration_order():
    calls = []
    fsm = _pipeline()
    for label in ("one", "two", "three"):
        fsm.on_enter_state(lambda e, label=label: calls.append(label))
    fsm.start().go("running")
    assert calls == ["one", "two", "three"]


def test_listener_payload():
    events = []
    fsm = _pipeline().on_enter_state(events.append).start()
    fsm.go("running").go("done")
    assert [(e.transition, e.source, e.dest) for e in events] == [
        ("idle->running", "idle", "running"),
        ("running->done", "running", "done"),
    ]


def test_listener_added_after_start():
    events = []
    fsm = _pipeline().start()
    fsm.go("running")
    fsm.on_enter_state(events.append)
    fsm.go("done")
    assert [e.dest for e in events] == ["done"]


def test_custom_error_handler_and_fault():
    """The error handler is notified and the caller still gets the exception."""
    notified = []
    fsm = _pipeline().add_error_handler(lambda *args: notified.append(args)).start()

    with pytest.raises(IllegalTransitionError) as exc:
        fsm.go("done")

    assert notified == [("idle->done", "idle", None)]
    assert exc.value.transition == "idle->done"


def test_default_error_handler_logs(caplog):
    caplog.set_level(logging.WARNING, logger="fsm_builder.machine")
    fsm = _pipeline().start()

    with pytest.raises(IllegalTransitionError):
        fsm.go("done")

    messages = [r.getMessage() for r in caplog.records if r.name == "fsm_builder.machine"]
    assert messages == ["Transition idle->done from idle to None fails."]


def test_default_error_handler_uses_config(caplog):
    caplog.set_level(logging.ERROR, logger="fsm_builder.machine")
    config = FSMConfig(
        transition_key_format="{from}2{to}",
        error_message_format="bad {name}: {from} => {to}",
        error_log_level=logging.ERROR,
    )
    fsm = _pipeline(config=config).start()

    with pytest.raises(IllegalTransitionError):
        fsm.go("done")
    fsm.go("running").go("done")

    records = [r for r in caplog.records if r.name == "fsm_builder.machine"]
    assert [r.getMessage() for r in records] == ["bad idle2done: idle => None"]
    assert records[0].levelno == logging.ERROR
    assert fsm.current() == "done"


def test_callback_errors_propagate():
    """An exception in a before callback aborts the move and reaches the caller."""

    def refuse(event):
        raise RuntimeError("not now")

    fsm = (
        FiniteStateMachine()
        .add_state("a")
        .add_state("b")
        .set_init_state("a")
        .add_transition("a", "b", on_before=refuse)
        .start()
    )
    with pytest.raises(RuntimeError, match="not now"):
        fsm.go("b")
    assert fsm.current() == "a"


def test_isolated_state_unreachable():
    """A declared state with no incoming edge cannot be entered."""
    fsm = (
        FiniteStateMachine()
        .add_state("a")
        .add_state("island")
        .set_init_state("a")
        .add_error_handler(lambda *args: None)
        .start()
    )
    with pytest.raises(IllegalTransitionError):
        fsm.go("island")
    assert fsm.current() == "a"


@dataclass
class Recorder:
    """Callable listener whose instances compare equal by label."""

    label: str
    calls: list = field(compare=False, repr=False)

    def __call__(self, event) -> None:
        self.calls.append(id(self))


def test_equal_listener_instances_are_separate():
    """Equal-but-distinct listeners both register and both fire."""
    calls = []
    first, second = Recorder("x", calls), Recorder("x", calls)
    fsm = _pipeline().on_enter_state(first).on_enter_state(second).start()
    fsm.go("running")
    assert calls == [id(first), id(second)]


def test_off_with_equal_stranger_keeps_listener():
    """Removing an equal instance that was never registered changes nothing."""
    calls = []
    registered = Recorder("x", calls)
    fsm = _pipeline().on_enter_state(registered)
    fsm.off_enter_state(Recorder("x", calls))
    fsm.start().go("running")
    assert calls == [id(registered)]
