"""Background tick driver."""

from __future__ import annotations

import threading
from collections.abc import Callable

from pinepomo.utils.logger import get_logger

logger = get_logger(__name__)


class TickDriver:
    """Calls ``tick`` on a fixed cadence from a daemon thread.

    Stopping the driver only stops the cadence; it never cancels the
    session being ticked.
    """

    def __init__(self, tick: Callable[[], object], interval: float = 1.0):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._tick = tick
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="pinepomo-tick", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        # wait() returns True once stop() is called
        while not self._stop_event.wait(self.interval):
            try:
                self._tick()
            except Exception:
                logger.exception("tick callback failed")

    def __enter__(self) -> TickDriver:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
