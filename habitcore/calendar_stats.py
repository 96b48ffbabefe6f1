"""Per-date completion stats for the calendar view."""

from __future__ import annotations

from habitcore.dates import days_in_month, parse_date
from habitcore.models import DayStats, Habit
from habitcore.rating import round_half_up


def day_stats(habits: list[Habit], day: str) -> DayStats:
    """How many habits have a positive value recorded on *day*."""
    total = len(habits)
    if total == 0:
        return DayStats()
    completed = sum(1 for h in habits if h.completed_dates.get(day, 0) > 0)
    return DayStats(
        completed=completed,
        total=total,
        percentage=round_half_up(completed / total * 100),
    )


def dates_in_month(year: int, month: int) -> list[str]:
    """Every date of a month (1-12) as YYYY-MM-DD."""
    return [f"{year:04d}-{month:02d}-{day:02d}" for day in range(1, days_in_month(year, month) + 1)]


def month_completion_stats(habits: list[Habit], year: int, month: int) -> dict[str, DayStats]:
    return {day: day_stats(habits, day) for day in dates_in_month(year, month)}


def format_date_for_display(day: str) -> str:
    """'2024-06-03' -> 'Monday, June 3, 2024'. Unparsable input is returned as-is."""
    d = parse_date(day)
    if d is None:
        return day
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"
