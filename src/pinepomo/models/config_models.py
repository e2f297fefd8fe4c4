"""Persisted application configuration models."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from pinepomo.models.timer import TimerConfig


class TodoistConfig(BaseModel):
    """Todoist integration settings."""

    api_key: str | None = Field(default=None, description="Todoist personal API token")
    post_comments: bool = Field(default=True)

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class NotificationConfig(BaseModel):
    """Completion notification settings."""

    enabled: bool = Field(default=True)


class StorageConfig(BaseModel):
    """Session storage settings."""

    db_path: str | None = Field(
        default=None, description="SQLite database path; defaults to the user data dir"
    )


class AppConfig(BaseModel):
    """Main Pinepomo configuration."""

    timer: TimerConfig = Field(default_factory=TimerConfig)
    todoist: TodoistConfig = Field(default_factory=TodoistConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
