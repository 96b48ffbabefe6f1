"""Habit analytics engine.

Streaks, completion rates, period comparisons and chart series computed
from the sparse per-habit completion maps. Every function is pure: it
takes the habit snapshot and ``today`` (local ISO date) explicitly and
returns plain values. Empty or unusable input degrades to zero values;
nothing here raises on data.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from habitcore.dates import (
    DAY_NAMES,
    SHORT_DAY_NAMES,
    days_inclusive,
    iter_days,
    js_weekday,
    parse_date,
    shift_days,
    shift_months,
    shift_years,
    week_start,
)
from habitcore.models import (
    BestDay,
    DayActivity,
    Habit,
    HabitPerformance,
    HeatmapCell,
    Insight,
    PeriodComparison,
    StreakData,
    TotalStats,
)
from habitcore.rating import performance_status, round_half_up, trend

BEST_DAYS_WINDOW = 56  # eight weeks
HEATMAP_DAYS = 35  # five-week grid
MAX_INSIGHTS = 4


def _to_days(dates: Iterable[str]) -> set[date]:
    days = set()
    for s in dates:
        d = parse_date(s)
        if d is not None:
            days.add(d)
    return days


def _select(habits: list[Habit], habit_id: str | None) -> list[Habit]:
    if habit_id:
        return [h for h in habits if h.id == habit_id]
    return list(habits)


def _done_days(habit: Habit) -> set[date]:
    return _to_days(k for k, v in habit.completed_dates.items() if v > 0)


# ── Streaks ───────────────────────────────────────────────────


def current_streak(dates: Iterable[str], today: str) -> int:
    """Consecutive days ending today, or yesterday if today isn't done yet."""
    days = _to_days(dates)
    check = parse_date(today)
    if not days or check is None:
        return 0
    if check not in days:
        check -= timedelta(days=1)
    streak = 0
    while check in days:
        streak += 1
        check -= timedelta(days=1)
    return streak


def best_streak(dates: Iterable[str]) -> int:
    """Longest run of consecutive days ever recorded."""
    best = run = 0
    prev: date | None = None
    for d in sorted(_to_days(dates)):
        if prev is not None and (d - prev).days == 1:
            run += 1
        else:
            best = max(best, run)
            run = 1
        prev = d
    return max(best, run)


def perfect_dates(habits: list[Habit], today: str) -> list[str]:
    """Days from the first recorded activity through today on which every habit was done.

    Every habit counts as due every day, including weekly and monthly ones.
    """
    today_d = parse_date(today)
    if not habits or today_d is None:
        return []
    done = [_done_days(h) for h in habits]
    activity = set().union(*done)
    if not activity:
        return []
    return [
        d.isoformat()
        for d in iter_days(min(activity), today_d)
        if all(d in days for days in done)
    ]


def streak_data(habits: list[Habit], today: str, habit_id: str | None = None) -> StreakData:
    """Current/best streak for one habit, or perfect-day streaks across all of them."""
    targets = _select(habits, habit_id)
    if not targets:
        return StreakData()
    if habit_id:
        dates = [k for k, v in targets[0].completed_dates.items() if v > 0]
    else:
        dates = perfect_dates(targets, today)
    return StreakData(current=current_streak(dates, today), best=best_streak(dates))


# ── Periods & completion rate ─────────────────────────────────


def period_range(period: str, reference: date, week_start_day: int = 0) -> tuple[date, date]:
    """[start, reference] for the week, month or year containing *reference*."""
    if period == "week":
        return week_start(reference, week_start_day), reference
    if period == "month":
        return reference.replace(day=1), reference
    if period == "year":
        return reference.replace(month=1, day=1), reference
    raise ValueError(f"Invalid period: {period!r}")


def previous_period_reference(period: str, reference: date) -> date:
    """The same point in the previous period, with calendar-correct month/year steps."""
    if period == "week":
        return shift_days(reference, -7)
    if period == "month":
        return shift_months(reference, -1)
    if period == "year":
        return shift_years(reference, -1)
    raise ValueError(f"Invalid period: {period!r}")


def possible_count(habit: Habit, days: int) -> int:
    """How many completions a habit could have in *days* days.

    Weekly habits are pro-rated by days per week and never drop below one
    occasion for a non-empty range; everything else is due daily.
    """
    if habit.frequency == "weekly":
        possible = round_half_up(days / 7 * (habit.days_per_week or 1))
        if possible == 0 and days >= 1:
            possible = 1
        return possible
    return days


def _count_in_range(habit: Habit, start: date, end: date) -> int:
    return sum(1 for d in _done_days(habit) if start <= d <= end)


def completion_rate(
    habits: list[Habit],
    period: str,
    today: str,
    habit_id: str | None = None,
    custom_range: tuple[date, date] | None = None,
    week_start_day: int = 0,
) -> int:
    """Average of per-habit min(1, actual/possible), as a 0-100 integer.

    The range is clipped at today so days that haven't happened yet never
    count toward "possible".
    """
    today_d = parse_date(today)
    if not habits or today_d is None:
        return 0
    start, end = custom_range or period_range(period, today_d, week_start_day)
    targets = _select(habits, habit_id)
    if not targets:
        return 0

    end = min(end, today_d)
    if end < start:
        return 0
    days = days_inclusive(start, end)

    total = 0.0
    counted = 0
    for habit in targets:
        possible = possible_count(habit, days)
        if possible > 0:
            total += min(1.0, _count_in_range(habit, start, end) / possible)
            counted += 1
    return round_half_up(total / counted * 100) if counted else 0


def compare_periods(
    habits: list[Habit],
    period: str,
    today: str,
    habit_id: str | None = None,
    week_start_day: int = 0,
) -> PeriodComparison:
    """Current period's rate against the same stretch of the previous period."""
    current = completion_rate(habits, period, today, habit_id, week_start_day=week_start_day)
    today_d = parse_date(today)
    if today_d is None:
        return PeriodComparison(current=current, previous=0, trend=trend(current, 0))
    previous_range = period_range(
        period, previous_period_reference(period, today_d), week_start_day
    )
    previous = completion_rate(
        habits, period, today, habit_id, custom_range=previous_range, week_start_day=week_start_day
    )
    return PeriodComparison(current=current, previous=previous, trend=trend(current, previous))


# ── Chart series ──────────────────────────────────────────────


def weekly_activity(
    habits: list[Habit],
    today: str,
    habit_id: str | None = None,
    week_start_day: int = 0,
) -> list[DayActivity]:
    """Per-day completion percentage for the current week.

    Every habit is counted as due on every day of the week.
    """
    targets = _select(habits, habit_id)
    today_d = parse_date(today)
    if not targets or today_d is None:
        labels = SHORT_DAY_NAMES[week_start_day:] + SHORT_DAY_NAMES[:week_start_day]
        return [DayActivity(day=label) for label in labels]

    start = week_start(today_d, week_start_day)
    result = []
    for i in range(7):
        d = start + timedelta(days=i)
        ds = d.isoformat()
        completed = sum(1 for h in targets if h.is_done_on(ds))
        result.append(DayActivity(
            day=SHORT_DAY_NAMES[js_weekday(d)],
            value=round_half_up(completed / len(targets) * 100),
            is_today=d == today_d,
        ))
    return result


def total_stats(habits: list[Habit]) -> TotalStats:
    if not habits:
        return TotalStats()
    all_dates: set[str] = set()
    total_completions = 0
    for habit in habits:
        for day, value in habit.completed_dates.items():
            if value > 0:
                all_dates.add(day)
                total_completions += 1

    perfect = sum(1 for day in all_dates if all(h.is_done_on(day) for h in habits))
    days_tracked = len(all_dates) or 1
    return TotalStats(
        total_habits=len(habits),
        total_completions=total_completions,
        perfect_days=perfect,
        avg_daily_completion=round_half_up(total_completions / days_tracked / len(habits) * 100),
    )


def best_days_analysis(habits: list[Habit], today: str) -> list[BestDay]:
    """Completion rate per weekday over the last eight weeks, Sunday first."""
    completed = [0] * 7
    total = [0] * 7
    today_d = parse_date(today)
    if habits and today_d is not None:
        for i in range(BEST_DAYS_WINDOW):
            d = today_d - timedelta(days=i)
            ds = d.isoformat()
            idx = js_weekday(d)
            for habit in habits:
                total[idx] += 1
                if habit.is_done_on(ds):
                    completed[idx] += 1

    return [
        BestDay(
            day=DAY_NAMES[i],
            short_day=SHORT_DAY_NAMES[i],
            completion_rate=round_half_up(completed[i] / total[i] * 100) if total[i] else 0,
            is_weekend=i in (0, 6),
        )
        for i in range(7)
    ]


def habit_performance(
    habits: list[Habit], period: str, today: str, week_start_day: int = 0
) -> list[HabitPerformance]:
    """Per-habit breakdown for the period, best performers first."""
    today_d = parse_date(today)
    if today_d is None:
        return []
    start, end = period_range(period, today_d, week_start_day)
    end = min(end, today_d)
    if end < start:
        return []
    days = days_inclusive(start, end)

    result = []
    for habit in habits:
        completed = _count_in_range(habit, start, end)
        possible = possible_count(habit, days)
        rate = round_half_up(completed / possible * 100) if possible > 0 else 0
        result.append(HabitPerformance(
            habit=habit,
            completion_rate=min(100, rate),
            completed_count=completed,
            possible_count=possible,
            status=performance_status(rate),
        ))
    result.sort(key=lambda p: p.completion_rate, reverse=True)
    return result


def monthly_heatmap(habits: list[Habit], today: str) -> list[HeatmapCell]:
    """The last 35 days as a 5x7 grid, oldest first."""
    today_d = parse_date(today)
    if not habits or today_d is None:
        return []
    cells = []
    for offset in range(HEATMAP_DAYS):
        d = today_d - timedelta(days=HEATMAP_DAYS - 1 - offset)
        ds = d.isoformat()
        completed = sum(1 for h in habits if h.is_done_on(ds))
        cells.append(HeatmapCell(
            date=ds,
            day_of_month=d.day,
            completion_rate=round_half_up(completed / len(habits) * 100),
            week_index=offset // 7,
            day_index=offset % 7,
        ))
    return cells


def daily_precision(
    habits: list[Habit], period: str, today: str, week_start_day: int = 0
) -> int:
    """Share of elapsed days in the period on which every habit was done."""
    today_d = parse_date(today)
    if not habits or today_d is None:
        return 0
    start, end = period_range(period, today_d, week_start_day)
    total_days = perfect = 0
    for d in iter_days(start, min(end, today_d)):
        total_days += 1
        ds = d.isoformat()
        if all(h.is_done_on(ds) for h in habits):
            perfect += 1
    return round_half_up(perfect / total_days * 100) if total_days else 0


# ── Insights ──────────────────────────────────────────────────


def generate_insights(habits: list[Habit], today: str) -> list[Insight]:
    """Up to four short observations about the user's consistency."""
    if not habits:
        return [Insight(
            icon="\U0001F3AF",
            title="Get Started",
            description="Add your first habit to begin tracking your progress!",
            type="info",
        )]

    insights = []
    totals = total_stats(habits)
    best_days = best_days_analysis(habits, today)
    streaks = streak_data(habits, today)

    best_day = max(best_days, key=lambda d: d.completion_rate)
    if best_day.completion_rate > 0:
        insights.append(Insight(
            icon="\U0001F4C5",
            title=f"{best_day.day}s are your best!",
            description=f"You complete {best_day.completion_rate}% of habits on {best_day.day}s",
            type="success",
        ))

    weekday_avg = sum(d.completion_rate for d in best_days if not d.is_weekend) / 5
    weekend_avg = sum(d.completion_rate for d in best_days if d.is_weekend) / 2
    if weekend_avg > weekday_avg + 10:
        insights.append(Insight(
            icon="\U0001F334",
            title="Weekend Warrior",
            description=f"You're {round_half_up(weekend_avg - weekday_avg)}% more consistent on weekends!",
            type="tip",
        ))
    elif weekday_avg > weekend_avg + 10:
        insights.append(Insight(
            icon="\U0001F4BC",
            title="Weekday Champion",
            description=f"You're {round_half_up(weekday_avg - weekend_avg)}% more consistent on weekdays!",
            type="tip",
        ))

    if streaks.current >= 7:
        insights.append(Insight(
            icon="\U0001F525",
            title="Amazing Streak!",
            description=f"You've been consistent for {streaks.current} days straight!",
            type="success",
        ))
    elif streaks.current >= 3:
        insights.append(Insight(
            icon="\U0001F31F",
            title="Building Momentum",
            description=f"{streaks.current} day streak! Keep going to beat your best of {streaks.best}!",
            type="info",
        ))
    elif streaks.best > 0:
        insights.append(Insight(
            icon="\U0001F4AA",
            title="Keep Pushing",
            description=f"Your best streak was {streaks.best} days. You can beat it!",
            type="tip",
        ))

    if totals.perfect_days >= 5:
        insights.append(Insight(
            icon="⭐",
            title="Perfect Day Master",
            description=f"You've had {totals.perfect_days} perfect days with all habits done!",
            type="success",
        ))

    for perf in habit_performance(habits, "week", today):
        if perf.status in ("poor", "fair"):
            if perf.completion_rate < 50:
                insights.append(Insight(
                    icon="\U0001F3AF",
                    title=f"Focus on {perf.habit.name}",
                    description=f"Only {perf.completion_rate}% this week. Try setting a reminder!",
                    type="warning",
                ))
            break

    return insights[:MAX_INSIGHTS]
