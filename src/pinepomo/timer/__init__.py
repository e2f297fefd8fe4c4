"""Timer core: state machine, event wiring and tick driver."""

from .driver import TickDriver
from .focus_timer import FocusTimer
from .machine import TimerState, TimerStateMachine

__all__ = ["FocusTimer", "TickDriver", "TimerState", "TimerStateMachine"]
