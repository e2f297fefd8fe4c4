"""SQLite storage adapter for timer sessions and settings."""

from __future__ import annotations

import sqlite3
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

from platformdirs import user_data_dir

from pinepomo.exceptions import StorageError
from pinepomo.models.timer import DEFAULT_CONFIG, TimerConfig, TimerSession
from pinepomo.storage.port import StoragePort, _as_date
from pinepomo.utils.logger import get_logger

logger = get_logger(__name__)

CREATE_SESSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS timer_sessions (
    id TEXT PRIMARY KEY,
    event_id TEXT NOT NULL,
    device_id TEXT NOT NULL,
    user_id TEXT,
    started_at TEXT NOT NULL,
    ended_at TEXT,
    duration_mins INTEGER NOT NULL,
    status TEXT NOT NULL,
    kind TEXT NOT NULL DEFAULT 'work',
    task_name TEXT,
    external_task_ref TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

CREATE_SETTINGS_TABLE = """
CREATE TABLE IF NOT EXISTS settings (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    data TEXT NOT NULL
)
"""

ALL_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_sessions_started ON timer_sessions(started_at)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_status ON timer_sessions(status)",
]

_COLUMNS = (
    "id",
    "event_id",
    "device_id",
    "user_id",
    "started_at",
    "ended_at",
    "duration_mins",
    "status",
    "kind",
    "task_name",
    "external_task_ref",
    "created_at",
    "updated_at",
)


def _add_missing_columns(conn: sqlite3.Connection) -> None:
    # Databases created before sessions recorded their kind
    columns = {row["name"] for row in conn.execute("PRAGMA table_info(timer_sessions)")}
    if "kind" not in columns:
        conn.execute(
            "ALTER TABLE timer_sessions ADD COLUMN kind TEXT NOT NULL DEFAULT 'work'"
        )


def _to_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class SqliteStorageAdapter(StoragePort):
    """Stores sessions in a local SQLite database.

    Timestamps are stored as UTC ISO-8601 strings so lexical order matches
    chronological order. Settings live in a single JSON row.
    """

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            db_path = Path(user_data_dir("pinepomo")) / "sessions.db"
        self.db_path = Path(db_path) if str(db_path) != ":memory:" else db_path
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            self._connection = self._connect()
        return self._connection

    def _connect(self) -> sqlite3.Connection:
        try:
            if isinstance(self.db_path, Path):
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path), check_same_thread=False, timeout=30.0)
            conn.row_factory = sqlite3.Row
            conn.execute(CREATE_SESSIONS_TABLE)
            conn.execute(CREATE_SETTINGS_TABLE)
            _add_missing_columns(conn)
            for idx_sql in ALL_INDEXES:
                conn.execute(idx_sql)
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Failed to open session database {self.db_path}: {e}") from e
        return conn

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def save_session(self, session: TimerSession) -> None:
        row = session.model_dump()
        row["status"] = session.status.value
        row["kind"] = session.kind.value
        for key in ("started_at", "ended_at", "created_at", "updated_at"):
            row[key] = _to_iso(row[key])

        placeholders = ", ".join("?" for _ in _COLUMNS)
        self._execute(
            f"INSERT OR REPLACE INTO timer_sessions ({', '.join(_COLUMNS)}) "
            f"VALUES ({placeholders})",
            tuple(row[col] for col in _COLUMNS),
        )

    async def get_session(self, session_id: str) -> TimerSession | None:
        rows = self._query("SELECT * FROM timer_sessions WHERE id = ?", (session_id,))
        return self._row_to_session(rows[0]) if rows else None

    async def get_current_session(self) -> TimerSession | None:
        rows = self._query(
            """
            SELECT * FROM timer_sessions
            WHERE status IN ('running', 'paused')
            ORDER BY updated_at DESC
            LIMIT 1
            """
        )
        return self._row_to_session(rows[0]) if rows else None

    async def get_sessions_by_date(self, day: date | datetime) -> list[TimerSession]:
        start = datetime.combine(_as_date(day), datetime.min.time(), tzinfo=timezone.utc)
        end = start + timedelta(days=1)
        rows = self._query(
            """
            SELECT * FROM timer_sessions
            WHERE started_at >= ? AND started_at < ?
            ORDER BY started_at
            """,
            (start.isoformat(), end.isoformat()),
        )
        return [self._row_to_session(row) for row in rows]

    async def get_all_sessions(self) -> list[TimerSession]:
        rows = self._query("SELECT * FROM timer_sessions ORDER BY started_at")
        return [self._row_to_session(row) for row in rows]

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def get_settings(self) -> TimerConfig:
        rows = self._query("SELECT data FROM settings WHERE id = 1")
        if not rows:
            return DEFAULT_CONFIG
        return TimerConfig.model_validate_json(rows[0]["data"])

    async def save_settings(self, config: TimerConfig) -> None:
        self._execute(
            "INSERT OR REPLACE INTO settings (id, data) VALUES (1, ?)",
            (config.model_dump_json(),),
        )

    # ------------------------------------------------------------------

    def _query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        try:
            return self.connection.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Query failed: {e}") from e

    def _execute(self, sql: str, params: tuple = ()) -> None:
        try:
            with self.connection:
                self.connection.execute(sql, params)
        except sqlite3.Error as e:
            raise StorageError(f"Write failed: {e}") from e

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> TimerSession:
        return TimerSession.model_validate(dict(row))
