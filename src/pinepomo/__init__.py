"""Pinepomo: a pomodoro focus timer built around a small session state machine."""

from pinepomo.events import TimerEventEmitter
from pinepomo.models.timer import (
    DEFAULT_CONFIG,
    SessionKind,
    StartTimerOptions,
    TimerConfig,
    TimerEvent,
    TimerEventType,
    TimerSession,
    TimerStatus,
)
from pinepomo.storage import MemoryStorageAdapter, StoragePort
from pinepomo.timer import FocusTimer, TickDriver, TimerState, TimerStateMachine

__version__ = "0.3.0"

__all__ = [
    "DEFAULT_CONFIG",
    "FocusTimer",
    "MemoryStorageAdapter",
    "SessionKind",
    "StartTimerOptions",
    "StoragePort",
    "TickDriver",
    "TimerConfig",
    "TimerEvent",
    "TimerEventEmitter",
    "TimerEventType",
    "TimerSession",
    "TimerState",
    "TimerStateMachine",
    "TimerStatus",
    "__version__",
]
