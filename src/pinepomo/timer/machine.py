"""Session state machine for a single pomodoro timer.

The machine owns zero or one session, the countdown and the timer
configuration. Every action is guard-based: when its precondition does not
hold the action is a silent no-op and returns ``False``, so callers can fire
actions speculatively without wrapping them in error handling.

Transitions::

    idle ──start──▶ running ──pause──▶ paused
                      │  ◀──resume──     │
                      ├──complete/tick──▶ completed
                      └──cancel──▶ cancelled ◀──cancel──┘

``reset`` returns to idle from anywhere. Completed and cancelled sessions
are never resurrected; ``start`` builds a fresh one.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from pinepomo.models.timer import (
    DEFAULT_CONFIG,
    StartTimerOptions,
    TimerConfig,
    TimerEventType,
    TimerSession,
    TimerStatus,
)
from pinepomo.utils.logger import get_logger

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _uuid4() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class TimerState:
    """Immutable snapshot of the machine's state."""

    session: TimerSession | None
    config: TimerConfig
    remaining_seconds: int

    @property
    def status(self) -> TimerStatus:
        return self.session.status if self.session else TimerStatus.IDLE


class TimerStateMachine:
    """Deterministic engine behind one focus/break timer.

    Args:
        config: Initial configuration (defaults to 25/5/15/8).
        device_id_provider: Callable returning this installation's device id.
            When omitted an id is generated once and reused for every session
            of this machine.
        clock: Callable returning the current aware datetime.
        id_factory: Callable returning a fresh unique id for sessions/events.
    """

    def __init__(
        self,
        config: TimerConfig | None = None,
        device_id_provider: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self._clock = clock or utc_now
        self._new_id = id_factory or _uuid4
        if device_id_provider is None:
            device_id = _uuid4()
            device_id_provider = lambda: device_id  # noqa: E731
        self._device_id = device_id_provider

        self._session: TimerSession | None = None
        self._config = config or DEFAULT_CONFIG
        self._remaining = 0
        # Reentrant: tick() completes through the same path as complete().
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> TimerState:
        """Atomic snapshot of session, config and countdown."""
        with self._lock:
            return TimerState(self._session, self._config, self._remaining)

    @property
    def lock(self) -> threading.RLock:
        """Lock serializing every action; held by orchestrators that must
        read the result of an action atomically with it."""
        return self._lock

    @property
    def session(self) -> TimerSession | None:
        """Current session. Read single fields only; use :attr:`state` for a
        consistent view of several."""
        return self._session

    @property
    def config(self) -> TimerConfig:
        """Unlocked read, see :attr:`session`."""
        return self._config

    @property
    def remaining_seconds(self) -> int:
        """Unlocked read, see :attr:`session`."""
        return self._remaining

    @property
    def status(self) -> TimerStatus:
        return self.state.status

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def start(self, options: StartTimerOptions | None = None, **kwargs) -> bool:
        """Start a new session.

        Options may be passed as a :class:`StartTimerOptions` or as keyword
        arguments (``task_name``, ``external_task_ref``, ``duration_mins``).
        Does nothing while a session is running. A paused session is *not*
        protected: starting replaces it.
        """
        if options is None:
            options = StartTimerOptions(**kwargs)

        with self._lock:
            if self._session is not None and self._session.status == TimerStatus.RUNNING:
                logger.debug("start ignored: session %s already running", self._session.id)
                return False

            if self._session is not None and self._session.status == TimerStatus.PAUSED:
                logger.info("Replacing paused session %s", self._session.id)

            duration_mins = options.duration_mins or self._config.work_mins
            now = self._clock()
            self._session = TimerSession(
                id=self._new_id(),
                event_id=self._new_id(),
                device_id=self._device_id(),
                started_at=now,
                duration_mins=duration_mins,
                status=TimerStatus.RUNNING,
                kind=options.kind,
                task_name=options.task_name,
                external_task_ref=options.external_task_ref,
                created_at=now,
                updated_at=now,
            )
            self._remaining = duration_mins * 60
            logger.debug("Started session %s (%d min)", self._session.id, duration_mins)
            return True

    def pause(self) -> bool:
        """running → paused."""
        return self._transition({TimerStatus.RUNNING}, TimerStatus.PAUSED)

    def resume(self) -> bool:
        """paused → running."""
        return self._transition({TimerStatus.PAUSED}, TimerStatus.RUNNING)

    def cancel(self) -> bool:
        """running | paused → cancelled."""
        return self._transition(
            {TimerStatus.RUNNING, TimerStatus.PAUSED}, TimerStatus.CANCELLED
        )

    def complete(self) -> bool:
        """running → completed, forcing the countdown to zero.

        A paused session must be resumed before it can complete.
        """
        with self._lock:
            if not self._transition({TimerStatus.RUNNING}, TimerStatus.COMPLETED):
                return False
            self._remaining = 0
            return True

    def tick(self) -> TimerEventType | None:
        """Advance the countdown by one second.

        Returns ``TimerEventType.TICK`` after a decrement,
        ``TimerEventType.COMPLETED`` when this tick finished the session, and
        ``None`` when the timer is not running.
        """
        with self._lock:
            if self._session is None or self._session.status != TimerStatus.RUNNING:
                return None

            if self._remaining <= 1:
                self.complete()
                return TimerEventType.COMPLETED

            self._remaining -= 1
            return TimerEventType.TICK

    def reset(self) -> bool:
        """Drop the session (whatever its status) and zero the countdown.

        Returns whether there was a session to drop. Config is untouched.
        """
        with self._lock:
            had_session = self._session is not None
            self._session = None
            self._remaining = 0
            return had_session

    def set_config(self, **changes: int | None) -> bool:
        """Merge the given fields into the config.

        Sessions already started keep their duration. Returns whether the
        config actually changed.
        """
        with self._lock:
            merged = self._config.merged(**changes)
            changed = merged != self._config
            self._config = merged
            return changed

    def restore(self, session: TimerSession, remaining_seconds: int) -> None:
        """Load a live session saved by a previous process.

        Raises:
            ValueError: If the session is terminal or remaining is negative.
        """
        if not session.is_live:
            raise ValueError(f"cannot restore a {session.status.value} session")
        if remaining_seconds < 0:
            raise ValueError("remaining_seconds must be >= 0")

        with self._lock:
            self._session = session
            self._remaining = min(remaining_seconds, session.total_seconds)

    # ------------------------------------------------------------------

    def _transition(self, allowed: set[TimerStatus], target: TimerStatus) -> bool:
        with self._lock:
            if self._session is None or self._session.status not in allowed:
                return False
            previous = self._session.status
            self._session = self._session.with_status(target, self._clock())
            logger.debug(
                "Session %s: %s -> %s", self._session.id, previous.value, target.value
            )
            return True
