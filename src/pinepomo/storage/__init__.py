"""Storage port and adapters."""

from .port import MemoryStorageAdapter, StoragePort
from .recorder import SessionRecorder
from .sqlite import SqliteStorageAdapter

__all__ = ["MemoryStorageAdapter", "SessionRecorder", "SqliteStorageAdapter", "StoragePort"]
