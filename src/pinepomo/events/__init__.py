"""Timer event notification layer."""

from .emitter import EventCallback, TimerEventEmitter

__all__ = ["EventCallback", "TimerEventEmitter"]
