"""Publish/subscribe fan-out for timer events."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from pinepomo.models.timer import TimerEvent, TimerEventType, TimerSession
from pinepomo.utils.logger import get_logger

logger = get_logger(__name__)

EventCallback = Callable[[TimerEvent], None]


class TimerEventEmitter:
    """Synchronous event emitter keyed by :class:`TimerEventType`.

    A callback is registered at most once per event type; listeners run in
    registration order and a failing listener is logged without stopping
    delivery to the rest.
    """

    def __init__(self):
        # dict preserves insertion order and dedupes by callback identity
        self._listeners: dict[TimerEventType, dict[EventCallback, None]] = {}

    def subscribe(self, type: TimerEventType, callback: EventCallback) -> Callable[[], None]:
        """Register *callback* for *type* and return a function undoing it."""
        type = TimerEventType(type)
        self._listeners.setdefault(type, {})[callback] = None

        def unsubscribe() -> None:
            self.unsubscribe(type, callback)

        return unsubscribe

    def on(self, type: TimerEventType) -> Callable[[EventCallback], EventCallback]:
        """Decorator form of :meth:`subscribe`."""

        def decorator(callback: EventCallback) -> EventCallback:
            self.subscribe(type, callback)
            return callback

        return decorator

    def unsubscribe(self, type: TimerEventType, callback: EventCallback) -> None:
        """Remove a registration; unknown callbacks are ignored."""
        listeners = self._listeners.get(TimerEventType(type))
        if listeners is not None:
            listeners.pop(callback, None)

    def publish(
        self, type: TimerEventType, session: TimerSession, remaining_seconds: int
    ) -> TimerEvent:
        """Build an event and deliver it to every listener for *type*."""
        type = TimerEventType(type)
        event = TimerEvent(
            type=type,
            session=session,
            remaining_seconds=remaining_seconds,
            timestamp=datetime.now(timezone.utc),
        )

        # Snapshot so listeners may (un)subscribe while being notified.
        for callback in list(self._listeners.get(type, ())):
            try:
                callback(event)
            except Exception:
                logger.exception("Error in timer event listener for %s", type.value)

        return event

    def listener_count(self, type: TimerEventType | None = None) -> int:
        if type is None:
            return sum(len(listeners) for listeners in self._listeners.values())
        return len(self._listeners.get(TimerEventType(type), ()))

    def clear(self) -> None:
        """Remove every subscription for every event type."""
        self._listeners.clear()
