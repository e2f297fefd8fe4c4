"""A state machine wired to an event emitter."""

from __future__ import annotations

from collections.abc import Callable

from pinepomo.events.emitter import EventCallback, TimerEventEmitter
from pinepomo.models.timer import StartTimerOptions, TimerEventType
from pinepomo.timer.machine import TimerState, TimerStateMachine


class FocusTimer:
    """Runs actions on a :class:`TimerStateMachine` and publishes the result.

    An event is published only when the machine reports a real transition;
    guarded no-ops stay silent. The machine lock is held through delivery, so
    listeners see the state the action produced. Other threads block on
    :attr:`state` until delivery ends, so listeners must be quick: a listener
    making a network call stalls every reader of the timer while it waits.
    """

    def __init__(
        self,
        machine: TimerStateMachine | None = None,
        emitter: TimerEventEmitter | None = None,
    ):
        self.machine = machine or TimerStateMachine()
        self.emitter = emitter or TimerEventEmitter()

    @property
    def state(self) -> TimerState:
        return self.machine.state

    def subscribe(self, type: TimerEventType, callback: EventCallback) -> Callable[[], None]:
        return self.emitter.subscribe(type, callback)

    def start(self, options: StartTimerOptions | None = None, **kwargs) -> bool:
        with self.machine.lock:
            changed = self.machine.start(options, **kwargs)
            return self._publish_if(changed, TimerEventType.STARTED)

    def pause(self) -> bool:
        with self.machine.lock:
            return self._publish_if(self.machine.pause(), TimerEventType.PAUSED)

    def resume(self) -> bool:
        with self.machine.lock:
            return self._publish_if(self.machine.resume(), TimerEventType.RESUMED)

    def cancel(self) -> bool:
        with self.machine.lock:
            return self._publish_if(self.machine.cancel(), TimerEventType.CANCELLED)

    def complete(self) -> bool:
        with self.machine.lock:
            return self._publish_if(self.machine.complete(), TimerEventType.COMPLETED)

    def tick(self) -> TimerEventType | None:
        with self.machine.lock:
            result = self.machine.tick()
            if result is not None:
                self._publish(result)
            return result

    def reset(self) -> bool:
        return self.machine.reset()

    def set_config(self, **changes: int | None) -> bool:
        return self.machine.set_config(**changes)

    def close(self) -> None:
        """Drop all listeners. The session itself is left alone."""
        self.emitter.clear()

    def _publish_if(self, changed: bool, type: TimerEventType) -> bool:
        if changed:
            self._publish(type)
        return changed

    def _publish(self, type: TimerEventType) -> None:
        state = self.machine.state
        if state.session is not None:
            self.emitter.publish(type, state.session, state.remaining_seconds)
