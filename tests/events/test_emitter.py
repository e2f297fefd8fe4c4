"""Unit tests for TimerEventEmitter."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from pinepomo.events import emitter as emitter_module
from pinepomo.events.emitter import TimerEventEmitter
from pinepomo.models.timer import TimerEventType
from pinepomo.timer.machine import TimerStateMachine


@pytest.fixture()
def emitter() -> TimerEventEmitter:
    return TimerEventEmitter()


@pytest.fixture()
def session():
    machine = TimerStateMachine()
    machine.start(task_name="Read")
    return machine.session


# ---------------------------------------------------------------------------
# subscribe / publish
# ---------------------------------------------------------------------------


class TestSubscribe:
    def test_delivers_event(self, emitter, session):
        callback = MagicMock()
        emitter.subscribe(TimerEventType.STARTED, callback)

        before = datetime.now(timezone.utc)
        event = emitter.publish(TimerEventType.STARTED, session, 1500)

        callback.assert_called_once_with(event)
        assert event.type == TimerEventType.STARTED
        assert event.session is session
        assert event.remaining_seconds == 1500
        assert event.timestamp >= before

    def test_only_matching_type(self, emitter, session):
        started, paused = MagicMock(), MagicMock()
        emitter.subscribe(TimerEventType.STARTED, started)
        emitter.subscribe(TimerEventType.PAUSED, paused)

        emitter.publish(TimerEventType.PAUSED, session, 10)

        started.assert_not_called()
        paused.assert_called_once()

    def test_accepts_string_type(self, emitter, session):
        callback = MagicMock()
        emitter.subscribe("timer:tick", callback)
        emitter.publish(TimerEventType.TICK, session, 9)
        callback.assert_called_once()

    def test_unknown_type_rejected(self, emitter):
        with pytest.raises(ValueError):
            emitter.subscribe("timer:exploded", MagicMock())

    def test_registration_order(self, emitter, session):
        order = []
        for name in ("a", "b", "c"):
            emitter.subscribe(TimerEventType.TICK, lambda e, name=name: order.append(name))
        emitter.publish(TimerEventType.TICK, session, 1)
        assert order == ["a", "b", "c"]

    def test_duplicate_registration_delivers_once(self, emitter, session):
        callback = MagicMock()
        emitter.subscribe(TimerEventType.TICK, callback)
        emitter.subscribe(TimerEventType.TICK, callback)
        emitter.publish(TimerEventType.TICK, session, 1)
        assert callback.call_count == 1
        assert emitter.listener_count(TimerEventType.TICK) == 1

    def test_same_callback_on_two_types(self, emitter, session):
        callback = MagicMock()
        emitter.subscribe(TimerEventType.PAUSED, callback)
        emitter.subscribe(TimerEventType.RESUMED, callback)
        emitter.publish(TimerEventType.PAUSED, session, 1)
        emitter.publish(TimerEventType.RESUMED, session, 1)
        assert callback.call_count == 2

    def test_publish_without_listeners(self, emitter, session):
        event = emitter.publish(TimerEventType.COMPLETED, session, 0)
        assert event.type == TimerEventType.COMPLETED

    def test_decorator_form(self, emitter, session):
        seen = []

        @emitter.on(TimerEventType.COMPLETED)
        def handle(event):
            seen.append(event.type)

        emitter.publish(TimerEventType.COMPLETED, session, 0)
        assert seen == [TimerEventType.COMPLETED]
        assert callable(handle)


# ---------------------------------------------------------------------------
# unsubscribe / clear
# ---------------------------------------------------------------------------


class TestUnsubscribe:
    def test_returned_function_removes_registration(self, emitter, session):
        callback = MagicMock()
        unsubscribe = emitter.subscribe(TimerEventType.TICK, callback)
        unsubscribe()
        emitter.publish(TimerEventType.TICK, session, 1)
        callback.assert_not_called()

    def test_returned_function_removes_only_its_type(self, emitter, session):
        callback = MagicMock()
        unsubscribe = emitter.subscribe(TimerEventType.TICK, callback)
        emitter.subscribe(TimerEventType.PAUSED, callback)
        unsubscribe()
        emitter.publish(TimerEventType.PAUSED, session, 1)
        callback.assert_called_once()

    def test_explicit_unsubscribe(self, emitter, session):
        callback = MagicMock()
        emitter.subscribe(TimerEventType.TICK, callback)
        emitter.unsubscribe(TimerEventType.TICK, callback)
        emitter.publish(TimerEventType.TICK, session, 1)
        callback.assert_not_called()

    def test_unsubscribe_unknown_is_noop(self, emitter):
        emitter.unsubscribe(TimerEventType.TICK, MagicMock())
        unsubscribe = emitter.subscribe(TimerEventType.TICK, MagicMock())
        unsubscribe()
        unsubscribe()

    def test_listener_may_unsubscribe_during_delivery(self, emitter, session):
        calls = []

        def once(event):
            calls.append("once")
            emitter.unsubscribe(TimerEventType.TICK, once)

        other = MagicMock()
        emitter.subscribe(TimerEventType.TICK, once)
        emitter.subscribe(TimerEventType.TICK, other)

        emitter.publish(TimerEventType.TICK, session, 2)
        emitter.publish(TimerEventType.TICK, session, 1)

        assert calls == ["once"]
        assert other.call_count == 2

    def test_clear(self, emitter, session):
        callback = MagicMock()
        for event_type in TimerEventType:
            emitter.subscribe(event_type, callback)
        emitter.clear()
        assert emitter.listener_count() == 0
        emitter.publish(TimerEventType.STARTED, session, 1)
        callback.assert_not_called()


# ---------------------------------------------------------------------------
# Failure isolation
# ---------------------------------------------------------------------------


class TestListenerFailures:
    def test_failure_does_not_stop_delivery(self, emitter, session):
        def boom(event):
            raise RuntimeError("broken listener")

        after = MagicMock()
        emitter.subscribe(TimerEventType.COMPLETED, boom)
        emitter.subscribe(TimerEventType.COMPLETED, after)

        with patch.object(emitter_module.logger, "exception") as log_exception:
            emitter.publish(TimerEventType.COMPLETED, session, 0)

        after.assert_called_once()
        log_exception.assert_called_once()
        assert "timer:completed" in log_exception.call_args.args

    def test_failure_leaves_registrations_intact(self, emitter, session):
        boom = MagicMock(side_effect=ValueError("nope"))
        emitter.subscribe(TimerEventType.TICK, boom)
        emitter.publish(TimerEventType.TICK, session, 2)
        emitter.publish(TimerEventType.TICK, session, 1)
        assert boom.call_count == 2
        assert emitter.listener_count(TimerEventType.TICK) == 1
