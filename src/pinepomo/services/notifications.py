"""Completion notifications rendered to the terminal."""

from __future__ import annotations

from collections.abc import Callable

from rich.console import Console
from rich.panel import Panel

from pinepomo.events.emitter import TimerEventEmitter
from pinepomo.models.timer import SessionKind, TimerEvent, TimerEventType

NOTIFICATION_MESSAGES: dict[SessionKind, dict[str, str]] = {
    SessionKind.WORK: {
        "title": "Focus session complete!",
        "body": "Great work! Time for a break.",
    },
    SessionKind.BREAK: {
        "title": "Break is over!",
        "body": "Ready to focus again?",
    },
    SessionKind.LONG_BREAK: {
        "title": "Long break is over!",
        "body": "Feeling refreshed? Let's get back to work!",
    },
}


class Notifier:
    """Shows a panel and rings the terminal bell when a session completes.

    The message follows the kind of the session that completed.
    """

    def __init__(self, console: Console | None = None, enabled: bool = True):
        self.console = console or Console()
        self.enabled = enabled
        self._unsubscribe: Callable[[], None] | None = None

    def attach(self, emitter: TimerEventEmitter) -> Notifier:
        self._unsubscribe = emitter.subscribe(TimerEventType.COMPLETED, self.notify)
        return self

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def notify(self, event: TimerEvent) -> None:
        if not self.enabled:
            return
        message = NOTIFICATION_MESSAGES[event.session.kind]
        body = message["body"]
        if event.session.task_name:
            body += f"\n\nTask: {event.session.task_name}"
        self.console.bell()
        self.console.print(
            Panel(
                body,
                title=f"[bold green]{message['title']}[/bold green]",
                border_style="green",
                padding=(1, 2),
            )
        )
