"""Persists session transitions published on an emitter."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

from pinepomo.events.emitter import TimerEventEmitter
from pinepomo.exceptions import StorageError
from pinepomo.models.timer import TimerEvent, TimerEventType
from pinepomo.storage.port import StoragePort
from pinepomo.utils.logger import get_logger

logger = get_logger(__name__)

# Ticks change only the countdown, which is not part of the session record.
RECORDED_EVENTS = tuple(t for t in TimerEventType if t is not TimerEventType.TICK)

Runner = Callable[[Coroutine[Any, Any, None]], Any]


class SessionRecorder:
    """Saves the session snapshot carried by every lifecycle event.

    Args:
        storage: Where sessions are saved.
        runner: Drives the storage coroutine to completion. Defaults to
            ``asyncio.run``, which suits synchronous hosts such as the CLI.
    """

    def __init__(self, storage: StoragePort, runner: Runner | None = None):
        self.storage = storage
        self._run = runner or asyncio.run
        self._unsubscribers: list[Callable[[], None]] = []

    def attach(self, emitter: TimerEventEmitter) -> SessionRecorder:
        for event_type in RECORDED_EVENTS:
            self._unsubscribers.append(emitter.subscribe(event_type, self.record))
        return self

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def record(self, event: TimerEvent) -> None:
        try:
            self._run(self.storage.save_session(event.session))
        except StorageError as e:
            logger.error("Failed to save session %s on %s: %s", event.session.id, event.type.value, e)
