"""Pinepomo data models."""

from .config_models import AppConfig, NotificationConfig, StorageConfig, TodoistConfig
from .timer import (
    DEFAULT_CONFIG,
    LIVE_STATUSES,
    TERMINAL_STATUSES,
    SessionKind,
    StartTimerOptions,
    TimerConfig,
    TimerEvent,
    TimerEventType,
    TimerSession,
    TimerStatus,
)

__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG",
    "LIVE_STATUSES",
    "NotificationConfig",
    "SessionKind",
    "StartTimerOptions",
    "StorageConfig",
    "TERMINAL_STATUSES",
    "TimerConfig",
    "TimerEvent",
    "TimerEventType",
    "TimerSession",
    "TimerStatus",
    "TodoistConfig",
]
