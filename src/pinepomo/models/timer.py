"""Timer domain models: configuration, sessions and events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TimerStatus(str, Enum):
    """Lifecycle status of the timer.

    ``IDLE`` is never stored on a session; it is what the machine reports
    when it holds no session at all.
    """

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


LIVE_STATUSES = frozenset({TimerStatus.RUNNING, TimerStatus.PAUSED})
TERMINAL_STATUSES = frozenset({TimerStatus.COMPLETED, TimerStatus.CANCELLED})


class SessionKind(str, Enum):
    """What a session is for. Only work sessions count as pomodoros."""

    WORK = "work"
    BREAK = "break"
    LONG_BREAK = "long-break"


class TimerEventType(str, Enum):
    """Event types published on state transitions."""

    STARTED = "timer:started"
    PAUSED = "timer:paused"
    RESUMED = "timer:resumed"
    COMPLETED = "timer:completed"
    CANCELLED = "timer:cancelled"
    TICK = "timer:tick"


class TimerConfig(BaseModel):
    """User configuration for timer durations."""

    model_config = ConfigDict(frozen=True)

    work_mins: int = Field(default=25, ge=1)
    break_mins: int = Field(default=5, ge=1)
    long_break_mins: int = Field(default=15, ge=1)
    daily_goal: int = Field(default=8, ge=1)

    def merged(self, **changes: int | None) -> TimerConfig:
        """Return a copy with the given fields replaced.

        Fields passed as ``None`` keep their current value. Unknown field
        names raise ``ValueError`` rather than being silently dropped.
        """
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"Unknown timer config field(s): {', '.join(sorted(unknown))}")

        updates = {key: value for key, value in changes.items() if value is not None}
        if not updates:
            return self
        return type(self).model_validate({**self.model_dump(), **updates})


DEFAULT_CONFIG = TimerConfig()


class StartTimerOptions(BaseModel):
    """Options for starting a new session."""

    task_name: str | None = None
    external_task_ref: str | None = None
    duration_mins: int | None = Field(default=None, ge=1)
    kind: SessionKind = SessionKind.WORK


class TimerSession(BaseModel):
    """A single focus or break attempt.

    Sessions are immutable; every transition produces a new record via
    :meth:`with_status`.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    event_id: str
    device_id: str
    user_id: str | None = None
    started_at: datetime
    ended_at: datetime | None = None
    duration_mins: int = Field(ge=1)
    status: TimerStatus
    kind: SessionKind = SessionKind.WORK
    task_name: str | None = None
    external_task_ref: str | None = None
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def _check_ended_at(self) -> TimerSession:
        if self.status == TimerStatus.IDLE:
            raise ValueError("a session cannot have status 'idle'")
        if self.is_terminal and self.ended_at is None:
            raise ValueError(f"{self.status.value} session must have ended_at")
        if not self.is_terminal and self.ended_at is not None:
            raise ValueError(f"{self.status.value} session must not have ended_at")
        return self

    @property
    def is_live(self) -> bool:
        return self.status in LIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def total_seconds(self) -> int:
        return self.duration_mins * 60

    def with_status(self, status: TimerStatus, now: datetime) -> TimerSession:
        """Return a copy moved to *status*, stamping ``updated_at``.

        Moving to a terminal status also stamps ``ended_at``.
        """
        update: dict = {"status": status, "updated_at": now}
        if status in TERMINAL_STATUSES:
            update["ended_at"] = now
        return self.model_copy(update=update)

    def with_user(self, user_id: str, now: datetime) -> TimerSession:
        """Return a copy attributed to *user_id* (set by a sync collaborator)."""
        return self.model_copy(update={"user_id": user_id, "updated_at": now})


@dataclass(frozen=True)
class TimerEvent:
    """Payload delivered to event listeners."""

    type: TimerEventType
    session: TimerSession
    remaining_seconds: int
    timestamp: datetime
