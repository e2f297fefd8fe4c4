"""Focus statistics computed from stored sessions."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from pydantic import BaseModel, Field

from pinepomo.models.timer import SessionKind, TimerSession, TimerStatus


class PeriodStats(BaseModel):
    completed: int = 0
    total_mins: int = 0


class WeekStats(PeriodStats):
    by_day: list[int] = Field(default_factory=lambda: [0] * 7)  # Mon..Sun


class BestDay(BaseModel):
    date: str = ""
    count: int = 0


class PomodoroStats(BaseModel):
    today: PeriodStats = Field(default_factory=PeriodStats)
    this_week: WeekStats = Field(default_factory=WeekStats)
    this_month: PeriodStats = Field(default_factory=PeriodStats)
    streak: int = 0
    best_day: BestDay = Field(default_factory=BestDay)


class DailyProgress(BaseModel):
    completed: int
    goal: int
    fraction: float


def _local_day(session: TimerSession, now: datetime) -> date:
    started = session.started_at
    if started.tzinfo is not None and now.tzinfo is not None:
        started = started.astimezone(now.tzinfo)
    return started.date()


def _period(sessions: list[TimerSession]) -> PeriodStats:
    return PeriodStats(
        completed=len(sessions),
        total_mins=sum(s.duration_mins for s in sessions),
    )


def compute_stats(
    sessions: Iterable[TimerSession], now: datetime | None = None
) -> PomodoroStats:
    """
    Aggregate completed work sessions into daily/weekly/monthly stats.

    Day boundaries follow the timezone of *now* (local time by default).
    Weeks start on Monday.

    Args:
        sessions: Any sessions; only completed work sessions are counted
        now: Reference time (defaults to the current local time)

    Returns:
        PomodoroStats for the periods containing *now*
    """
    if now is None:
        now = datetime.now().astimezone()

    today = now.date()
    week_start = today - timedelta(days=today.weekday())
    month_start = today.replace(day=1)

    completed = [
        s
        for s in sessions
        if s.status == TimerStatus.COMPLETED and s.kind == SessionKind.WORK
    ]
    days = [(s, _local_day(s, now)) for s in completed]

    today_sessions = [s for s, d in days if d == today]
    week_sessions = [s for s, d in days if week_start <= d <= today]
    month_sessions = [s for s, d in days if month_start <= d <= today]

    by_day = [0] * 7
    for s, d in days:
        if week_start <= d <= today:
            by_day[d.weekday()] += 1

    per_day = Counter(d for _, d in days)

    # Streak counts back from today, or from yesterday if today is still empty
    streak = 0
    check = today if today in per_day else today - timedelta(days=1)
    while check in per_day:
        streak += 1
        check -= timedelta(days=1)

    best_day = BestDay()
    for d in sorted(per_day):
        if per_day[d] > best_day.count:
            best_day = BestDay(date=d.isoformat(), count=per_day[d])

    week = _period(week_sessions)
    return PomodoroStats(
        today=_period(today_sessions),
        this_week=WeekStats(**week.model_dump(), by_day=by_day),
        this_month=_period(month_sessions),
        streak=streak,
        best_day=best_day,
    )


def daily_progress(completed_today: int, goal: int) -> DailyProgress:
    """Progress toward the daily goal, with the fraction capped at 1.0."""
    fraction = min(completed_today / goal, 1.0) if goal > 0 else 0.0
    return DailyProgress(completed=completed_today, goal=goal, fraction=fraction)
