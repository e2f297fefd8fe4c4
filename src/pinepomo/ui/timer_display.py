"""Live countdown panel for a running session."""

from __future__ import annotations

import time
from collections.abc import Callable

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from pinepomo.models.timer import TimerStatus
from pinepomo.timer.focus_timer import FocusTimer
from pinepomo.timer.machine import TimerState

_HEADERS = {
    TimerStatus.RUNNING: ("🍅", "Pinepomo Focus", "cyan"),
    TimerStatus.PAUSED: ("⏸️ ", "PAUSED", "yellow"),
    TimerStatus.COMPLETED: ("✓", "COMPLETED", "green"),
    TimerStatus.CANCELLED: ("✗", "CANCELLED", "red"),
    TimerStatus.IDLE: ("·", "IDLE", "dim"),
}


def format_clock(seconds: int) -> str:
    mins, secs = divmod(max(0, seconds), 60)
    return f"{mins:02d}:{secs:02d}"


def progress_percent(state: TimerState) -> int:
    if state.session is None:
        return 0
    total = state.session.total_seconds
    elapsed = total - state.remaining_seconds
    return min(100, int(elapsed * 100 / total)) if total > 0 else 0


class TimerDisplay:
    """Renders a :class:`FocusTimer` and maps keys to its actions."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def render(self, state: TimerState, daily: tuple[int, int] | None = None) -> Panel:
        emoji, title, color = _HEADERS[state.status]
        return Panel(
            self._body(state, daily),
            title=f"[bold {color}]{emoji}  {title}[/bold {color}]",
            subtitle=self._footer(state.status),
            border_style=color,
            padding=(1, 4),
        )

    def _body(self, state: TimerState, daily: tuple[int, int] | None) -> Group:
        components = []

        if state.session and state.session.task_name:
            components.append(Text(state.session.task_name[:50], style="bold white", justify="center"))
            components.append(Text(""))

        remaining = state.remaining_seconds
        if state.status == TimerStatus.PAUSED:
            timer_color = "yellow"
        elif remaining < 60:
            timer_color = "red"
        elif remaining < 300:
            timer_color = "yellow"
        else:
            timer_color = "cyan"
        components.append(Text(format_clock(remaining), style=f"bold {timer_color}", justify="center"))
        components.append(Text(""))

        pct = progress_percent(state)
        bar_width = 40
        filled = bar_width * pct // 100
        bar = "▓" * filled + "░" * (bar_width - filled)
        components.append(Text(f"{bar}  {pct}%", style="dim", justify="center"))

        if daily is not None:
            done, goal = daily
            components.append(Text(""))
            components.append(Text(f"Today: {done}/{goal} 🍅", style="dim", justify="center"))

        return Group(*components)

    def _footer(self, status: TimerStatus) -> Text:
        if status == TimerStatus.PAUSED:
            hints = "Press 'r' to resume  •  's' to stop"
        else:
            hints = "Press 'p' to pause  •  's' to stop"
        return Text(hints, style="dim", justify="center")

    def run(
        self,
        timer: FocusTimer,
        get_key: Callable[[], str | None],
        daily: tuple[int, int] | None = None,
        refresh: float = 0.25,
    ) -> TimerStatus:
        """Show the timer until its session ends and return the final status.

        The countdown itself is driven elsewhere (a :class:`TickDriver`); this
        loop only renders and forwards keys. Ctrl-C cancels the session.
        """
        try:
            with Live(
                self.render(timer.state, daily),
                console=self.console,
                refresh_per_second=4,
            ) as live:
                while True:
                    key = get_key()
                    if key == "p":
                        timer.pause()
                    elif key == "r":
                        timer.resume()
                    elif key in ("s", "q"):
                        timer.cancel()

                    state = timer.state
                    live.update(self.render(state, daily))
                    if state.session is None or state.session.is_terminal:
                        return state.status
                    time.sleep(refresh)
        except KeyboardInterrupt:
            timer.cancel()
            return timer.state.status
