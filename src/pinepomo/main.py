"""Main entry point for the Pinepomo CLI."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

import httpx
import typer
from rich.console import Console
from rich.table import Table

from pinepomo import __version__
from pinepomo.exceptions import PinepomoError
from pinepomo.models.config_models import AppConfig
from pinepomo.models.timer import SessionKind, StartTimerOptions, TimerSession, TimerStatus
from pinepomo.services.config_service import get_config_service
from pinepomo.services.device import DeviceIdentityProvider
from pinepomo.services.notifications import Notifier
from pinepomo.services.stats_service import compute_stats, daily_progress
from pinepomo.services.todoist import TodoistClient, TodoistCompletionReporter
from pinepomo.storage import SessionRecorder, SqliteStorageAdapter
from pinepomo.timer import FocusTimer, TickDriver, TimerStateMachine
from pinepomo.ui.keyboard import create_keyboard_handler
from pinepomo.ui.timer_display import TimerDisplay, format_clock
from pinepomo.utils.logger import get_logger

logger = get_logger(__name__)
T = TypeVar("T")
console = Console()

app = typer.Typer(
    name="pinepomo",
    help="A pomodoro focus timer for the terminal",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Show and change settings")
app.add_typer(config_app, name="config")


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]Error: {message}[/red]")
    return typer.Exit(1)


def _open_storage() -> SqliteStorageAdapter:
    return SqliteStorageAdapter(get_config_service().db_path)


def _query_storage(query: Callable[[SqliteStorageAdapter], Coroutine[Any, Any, T]]) -> T:
    """Run one storage query to completion and close the database."""
    storage = _open_storage()
    try:
        return asyncio.run(query(storage))
    except PinepomoError as e:
        raise _fail(str(e)) from e
    finally:
        storage.close()


def _duration_for(kind: SessionKind, config: AppConfig) -> int:
    if kind == SessionKind.BREAK:
        return config.timer.break_mins
    if kind == SessionKind.LONG_BREAK:
        return config.timer.long_break_mins
    return config.timer.work_mins


def build_timer(
    config: AppConfig,
    storage: SqliteStorageAdapter,
    device_dir=None,
) -> FocusTimer:
    """Wire a FocusTimer with persistence, notifications and Todoist."""
    machine = TimerStateMachine(
        config=config.timer,
        device_id_provider=DeviceIdentityProvider(device_dir),
    )
    timer = FocusTimer(machine)
    SessionRecorder(storage).attach(timer.emitter)
    Notifier(console, enabled=config.notifications.enabled).attach(timer.emitter)
    if config.todoist.api_key and config.todoist.post_comments:
        TodoistCompletionReporter(TodoistClient(config.todoist.api_key)).attach(timer.emitter)
    return timer


def _completed_today(storage: SqliteStorageAdapter) -> int:
    sessions = asyncio.run(storage.get_all_sessions())
    return compute_stats(sessions).today.completed


@app.command()
def start(
    task: str = typer.Option(None, "--task", "-t", help="What you are focusing on"),
    todoist_task: str = typer.Option(
        None, "--todoist-task", help="Todoist task ID to comment on when done"
    ),
    duration: int = typer.Option(
        None, "--duration", "-d", min=1, help="Duration in minutes (overrides --kind)"
    ),
    kind: SessionKind = typer.Option(SessionKind.WORK, "--kind", "-k", help="Session kind"),
):
    """Start a focus or break session and show the countdown."""
    service = get_config_service()
    try:
        config = service.load_config()
        storage = _open_storage()
        existing = asyncio.run(storage.get_current_session())
    except PinepomoError as e:
        raise _fail(str(e)) from e

    if existing is not None:
        storage.close()
        console.print("[red]Error: Another session is already active[/red]")
        console.print(f"Task: {existing.task_name or 'N/A'}  Status: {existing.status.value}")
        console.print("\nUse 'pinepomo stop' to cancel it.")
        raise typer.Exit(1)

    timer = build_timer(config, storage, device_dir=service.data_dir)
    timer.start(
        StartTimerOptions(
            task_name=task,
            external_task_ref=todoist_task,
            duration_mins=duration or _duration_for(kind, config),
            kind=kind,
        )
    )
    goal = config.timer.daily_goal
    daily = (_completed_today(storage), goal)

    keyboard = create_keyboard_handler()
    try:
        with TickDriver(timer.tick):
            status = TimerDisplay(console).run(timer, keyboard.get_key, daily=daily)
    finally:
        keyboard.stop()
        timer.close()

    if status == TimerStatus.CANCELLED:
        state = timer.state
        console.print(
            f"[yellow]Session stopped with {format_clock(state.remaining_seconds)} remaining[/yellow]"
        )
    elif status == TimerStatus.COMPLETED and kind == SessionKind.WORK:
        progress = daily_progress(_completed_today(storage), goal)
        console.print(f"[green]{progress.completed}/{progress.goal} pomodoros today[/green]")
    storage.close()


@app.command()
def stop():
    """Cancel a session left running or paused by another process."""
    service = get_config_service()
    try:
        config = service.load_config()
        storage = _open_storage()
        existing = asyncio.run(storage.get_current_session())
    except PinepomoError as e:
        raise _fail(str(e)) from e

    if existing is None:
        storage.close()
        console.print("[dim]No active session.[/dim]")
        return

    machine = TimerStateMachine(config=config.timer)
    machine.restore(existing, existing.total_seconds)
    timer = FocusTimer(machine)
    SessionRecorder(storage).attach(timer.emitter)
    timer.cancel()
    timer.close()
    storage.close()
    console.print(f"[yellow]Cancelled session {existing.id[:8]}[/yellow]")


@app.command()
def status():
    """Show the active session, if any."""
    existing = _query_storage(lambda storage: storage.get_current_session())

    if existing is None:
        console.print("[dim]No active session.[/dim]")
        return
    console.print(f"[bold]{existing.status.value.upper()}[/bold] {existing.task_name or ''}")
    console.print(f"Started: {existing.started_at.astimezone():%H:%M}  Duration: {existing.duration_mins} min")


def _session_row(session: TimerSession) -> list[str]:
    return [
        session.id[:8],
        session.started_at.astimezone().strftime("%Y-%m-%d %H:%M"),
        f"{session.duration_mins}m",
        session.kind.value,
        session.status.value,
        session.task_name or "",
    ]


@app.command()
def history(limit: int = typer.Option(20, "--limit", "-n", min=1, help="Sessions to show")):
    """Show recent sessions, newest first."""
    sessions = _query_storage(lambda storage: storage.get_all_sessions())

    if not sessions:
        console.print("[dim]No sessions yet.[/dim]")
        return

    table = Table(title="Recent sessions")
    for column in ("ID", "Started", "Duration", "Kind", "Status", "Task"):
        table.add_column(column)
    for session in list(reversed(sessions))[:limit]:
        table.add_row(*_session_row(session))
    console.print(table)


@app.command()
def stats(output: str = typer.Option(None, "--output", "-o", help="Output format (json)")):
    """Show focus statistics."""
    service = get_config_service()
    try:
        config = service.load_config()
    except PinepomoError as e:
        raise _fail(str(e)) from e
    sessions = _query_storage(lambda storage: storage.get_all_sessions())

    result = compute_stats(sessions)
    if output == "json":
        console.print_json(data=result.model_dump(mode="json"))
        return

    progress = daily_progress(result.today.completed, config.timer.daily_goal)
    console.print("\n[bold cyan]🍅 Focus Summary[/bold cyan]\n")
    console.print(
        f"Today:      [bold]{result.today.completed}[/bold] pomodoros "
        f"({result.today.total_mins} min)  goal {progress.goal}"
    )
    console.print(f"This week:  [bold]{result.this_week.completed}[/bold] ({result.this_week.total_mins} min)")
    console.print(f"This month: [bold]{result.this_month.completed}[/bold] ({result.this_month.total_mins} min)")
    console.print(f"Streak:     [bold]{result.streak}[/bold] day(s)")
    if result.best_day.count:
        console.print(f"Best day:   {result.best_day.date} ({result.best_day.count})")


@app.command()
def tasks(
    filter: str = typer.Option("(today | overdue)", "--filter", "-f", help="Todoist filter"),
):
    """List Todoist tasks you can link with 'start --todoist-task'."""
    config = get_config_service().load_config()
    if not config.todoist.api_key:
        raise _fail("No Todoist API key. Run 'pinepomo config todoist --api-key KEY'.")

    client = TodoistClient(config.todoist.api_key)
    try:
        found = asyncio.run(client.get_tasks(filter))
    except (ValueError, PermissionError, httpx.HTTPError) as e:
        raise _fail(f"Could not fetch Todoist tasks: {e}") from e

    table = Table(title="Todoist tasks")
    for column in ("ID", "P", "Due", "Task"):
        table.add_column(column)
    for t in found:
        table.add_row(t.id, str(t.priority), t.due.date if t.due else "", t.content)
    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Pinepomo[/bold] version [cyan]{__version__}[/cyan]")


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Print the current settings."""
    config = get_config_service().load_config()
    data = config.model_dump(mode="json")
    if data["todoist"]["api_key"]:
        data["todoist"]["api_key"] = "****" + data["todoist"]["api_key"][-4:]
    console.print_json(data=data)


@config_app.command("set")
def config_set(
    work: int = typer.Option(None, "--work", help="Focus minutes"),
    break_: int = typer.Option(None, "--break", help="Short break minutes"),
    long_break: int = typer.Option(None, "--long-break", help="Long break minutes"),
    daily_goal: int = typer.Option(None, "--daily-goal", help="Pomodoros per day"),
):
    """Change timer settings; options you leave out keep their value."""
    try:
        timer = get_config_service().update_timer(
            work_mins=work,
            break_mins=break_,
            long_break_mins=long_break,
            daily_goal=daily_goal,
        )
    except PinepomoError as e:
        raise _fail(str(e)) from e
    console.print(
        f"[green]Saved[/green] work={timer.work_mins} break={timer.break_mins} "
        f"long_break={timer.long_break_mins} daily_goal={timer.daily_goal}"
    )


@config_app.command("todoist")
def config_todoist(
    api_key: str = typer.Option(None, "--api-key", help="Todoist API token"),
    disconnect: bool = typer.Option(False, "--disconnect", help="Forget the token"),
):
    """Connect or disconnect Todoist."""
    service = get_config_service()
    if disconnect:
        service.set_todoist_api_key(None)
        console.print("[yellow]Todoist disconnected[/yellow]")
        return
    if not api_key:
        raise _fail("Pass --api-key or --disconnect")

    if not asyncio.run(TodoistClient(api_key).validate_key()):
        raise _fail("Todoist rejected that API key")
    service.set_todoist_api_key(api_key)
    console.print("[green]Todoist connected[/green]")


@config_app.command("reset")
def config_reset():
    """Restore default settings."""
    get_config_service().reset_config()
    console.print("[green]Settings reset to defaults[/green]")


if __name__ == "__main__":
    app()
