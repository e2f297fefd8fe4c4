"""Storage port for sessions and settings.

The timer core never calls storage itself; orchestrators (the CLI, the
:class:`~pinepomo.storage.recorder.SessionRecorder`) do.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone

from pinepomo.models.timer import DEFAULT_CONFIG, TimerConfig, TimerSession


def session_day(session: TimerSession) -> date:
    """UTC calendar day a session started on."""
    started = session.started_at
    if started.tzinfo is not None:
        started = started.astimezone(timezone.utc)
    return started.date()


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


class StoragePort(ABC):
    """Abstract storage interface for cross-platform storage adapters."""

    @abstractmethod
    async def save_session(self, session: TimerSession) -> None:
        """Insert or replace a session by id."""

    @abstractmethod
    async def get_session(self, session_id: str) -> TimerSession | None:
        """Return the session with *session_id*, or None."""

    @abstractmethod
    async def get_current_session(self) -> TimerSession | None:
        """Return the most recently updated running or paused session."""

    @abstractmethod
    async def get_sessions_by_date(self, day: date | datetime) -> list[TimerSession]:
        """Return sessions that started on the given UTC calendar day."""

    @abstractmethod
    async def get_all_sessions(self) -> list[TimerSession]:
        """Return every stored session, oldest first."""

    @abstractmethod
    async def get_settings(self) -> TimerConfig:
        """Return saved settings, or the defaults when nothing was saved."""

    @abstractmethod
    async def save_settings(self, config: TimerConfig) -> None:
        """Persist settings."""


class MemoryStorageAdapter(StoragePort):
    """In-memory storage adapter for testing."""

    def __init__(self):
        self._sessions: dict[str, TimerSession] = {}
        self._config: TimerConfig | None = None

    async def save_session(self, session: TimerSession) -> None:
        self._sessions[session.id] = session

    async def get_session(self, session_id: str) -> TimerSession | None:
        return self._sessions.get(session_id)

    async def get_current_session(self) -> TimerSession | None:
        live = [s for s in self._sessions.values() if s.is_live]
        if not live:
            return None
        return max(live, key=lambda s: s.updated_at)

    async def get_sessions_by_date(self, day: date | datetime) -> list[TimerSession]:
        target = _as_date(day)
        return [s for s in await self.get_all_sessions() if session_day(s) == target]

    async def get_all_sessions(self) -> list[TimerSession]:
        return sorted(self._sessions.values(), key=lambda s: s.started_at)

    async def get_settings(self) -> TimerConfig:
        return self._config or DEFAULT_CONFIG

    async def save_settings(self, config: TimerConfig) -> None:
        self._config = config
