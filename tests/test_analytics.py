"""Tests for habitcore/analytics.py: streaks, completion rates and chart series."""

from datetime import date, timedelta

import pytest

from habitcore.analytics import (
    best_days_analysis,
    best_streak,
    compare_periods,
    completion_rate,
    current_streak,
    daily_precision,
    generate_insights,
    habit_performance,
    monthly_heatmap,
    perfect_dates,
    possible_count,
    previous_period_reference,
    streak_data,
    total_stats,
    weekly_activity,
)
from habitcore.dates import iter_days
from habitcore.models import Habit

TODAY = "2024-06-05"  # Wednesday


def _habit(hid, dates, frequency="daily", days_per_week=7, name=None):
    return Habit.from_dict({
        "id": hid,
        "name": name or f"Habit {hid}",
        "frequency": frequency,
        "daysPerWeek": days_per_week,
        "completedDates": {d: 1 for d in dates},
    })


def _sample_habits():
    return [
        _habit("1", ["2024-06-01", "2024-06-02", "2024-06-03", "2024-06-04", "2024-06-05"], name="Read"),
        _habit("2", ["2024-06-03", "2024-06-04", "2024-06-05"], name="Meditate"),
        _habit("3", ["2024-06-03", "2024-06-05"], frequency="weekly", days_per_week=3, name="Gym"),
    ]


# ── Streaks ───────────────────────────────────────────────────


def test_current_streak_today_only():
    assert current_streak(["2024-06-05"], TODAY) == 1


def test_current_streak_anchors_on_yesterday():
    assert current_streak(["2024-06-04"], TODAY) == 1


def test_current_streak_broken_two_days_ago():
    assert current_streak(["2024-06-03"], TODAY) == 0


def test_current_streak_crosses_month_boundary():
    assert current_streak(["2024-05-30", "2024-05-31", "2024-06-01"], "2024-06-01") == 3


def test_best_streak_consecutive():
    assert best_streak(["2024-01-01", "2024-01-02", "2024-01-03"]) == 3


def test_best_streak_with_gap():
    assert best_streak(["2024-01-01", "2024-01-03"]) == 1


def test_streaks_empty():
    assert current_streak([], TODAY) == 0
    assert best_streak([]) == 0


def test_current_never_exceeds_best():
    date_sets = [
        ["2024-06-05"],
        ["2024-06-01", "2024-06-02", "2024-06-04", "2024-06-05"],
        ["2024-05-20", "2024-05-21", "2024-05-22", "2024-06-04"],
        ["2024-06-03"],
    ]
    for dates in date_sets:
        assert current_streak(dates, TODAY) <= best_streak(dates)


def test_perfect_dates_require_every_habit():
    habits = [_habit("a", ["2024-06-01", "2024-06-02", "2024-06-03"]), _habit("b", ["2024-06-02", "2024-06-03"])]
    assert perfect_dates(habits, "2024-06-03") == ["2024-06-02", "2024-06-03"]


def test_streak_data_aggregate_uses_perfect_days():
    habits = [_habit("a", ["2024-06-01", "2024-06-02", "2024-06-03"]), _habit("b", ["2024-06-02", "2024-06-03"])]
    streaks = streak_data(habits, "2024-06-03")
    assert streaks.current == 2
    assert streaks.best == 2


def test_streak_data_single_habit():
    habits = [_habit("a", ["2024-06-01", "2024-06-02", "2024-06-03"]), _habit("b", ["2024-06-02"])]
    streaks = streak_data(habits, "2024-06-03", habit_id="a")
    assert streaks.to_dict() == {"current": 3, "best": 3}


def test_streak_data_unknown_habit():
    streaks = streak_data(_sample_habits(), TODAY, habit_id="missing")
    assert streaks.current == 0
    assert streaks.best == 0


# ── Completion rate ───────────────────────────────────────────


def test_completion_rate_no_habits():
    assert completion_rate([], "week", TODAY) == 0


def test_completion_rate_every_day_is_100():
    habits = [_habit("a", ["2024-06-02", "2024-06-03", "2024-06-04", "2024-06-05"])]
    assert completion_rate(habits, "week", TODAY) == 100


def test_completion_rate_never_recorded_is_0():
    assert completion_rate([_habit("a", [])], "week", TODAY) == 0


def test_completion_rate_weekly_one_day_per_week():
    habits = [_habit("a", ["2024-06-04"], frequency="weekly", days_per_week=1)]
    # Saturday closes the Sunday-anchored week: seven elapsed days.
    assert completion_rate(habits, "week", "2024-06-08") == 100


def test_completion_rate_clips_range_at_today():
    habits = [_habit("a", ["2024-06-01", "2024-06-02"])]
    rate = completion_rate(
        habits, "week", "2024-06-02", custom_range=(date(2024, 6, 1), date(2024, 6, 7))
    )
    assert rate == 100


def test_completion_rate_mixed_habits():
    # Read 4/4, Meditate 3/4, Gym 2 of round(4/7*3)=2
    assert completion_rate(_sample_habits(), "week", TODAY) == 92


def test_completion_rate_monday_week_start():
    assert completion_rate(_sample_habits(), "week", TODAY, week_start_day=1) == 100


def test_completion_rate_month():
    # Read 5/5, Meditate 3/5, Gym 2 of round(5/7*3)=2
    assert completion_rate(_sample_habits(), "month", TODAY) == 87


def test_completion_rate_single_habit_filter():
    assert completion_rate(_sample_habits(), "week", TODAY, habit_id="2") == 75


def test_completion_rate_always_in_bounds():
    habits = _sample_habits()
    for period in ("week", "month", "year"):
        assert 0 <= completion_rate(habits, period, TODAY) <= 100


def test_completion_rate_invalid_period():
    with pytest.raises(ValueError):
        completion_rate(_sample_habits(), "decade", TODAY)


def test_possible_count_weekly_floor_of_one():
    habit = _habit("a", [], frequency="weekly", days_per_week=1)
    assert possible_count(habit, 1) == 1
    assert possible_count(habit, 0) == 0
    assert possible_count(_habit("b", []), 5) == 5


# ── Comparison ────────────────────────────────────────────────


def test_previous_month_clamps_to_end_of_february():
    assert previous_period_reference("month", date(2023, 3, 31)) == date(2023, 2, 28)
    assert previous_period_reference("month", date(2024, 3, 31)) == date(2024, 2, 29)


def test_compare_periods_week_trend_down():
    habits = [_habit("a", ["2024-05-26", "2024-05-27", "2024-05-28", "2024-05-29", "2024-06-02"])]
    comparison = compare_periods(habits, "week", TODAY)
    assert comparison.current == 25
    assert comparison.previous == 100
    assert comparison.trend == "down"


def test_compare_periods_month_from_march_31():
    february = [d.isoformat() for d in iter_days(date(2023, 2, 1), date(2023, 2, 28))]
    comparison = compare_periods([_habit("a", february)], "month", "2023-03-31")
    assert comparison.previous == 100
    assert comparison.current == 0
    assert comparison.trend == "down"


def test_compare_periods_same():
    comparison = compare_periods([_habit("a", [])], "year", TODAY)
    assert comparison.to_dict() == {"current": 0, "previous": 0, "trend": "same"}


# ── Chart series ──────────────────────────────────────────────


def test_weekly_activity_values():
    habits = [_habit("a", ["2024-06-02", "2024-06-03"]), _habit("b", ["2024-06-03"])]
    days = weekly_activity(habits, TODAY)
    assert [d.day for d in days] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    assert [d.value for d in days] == [50, 100, 0, 0, 0, 0, 0]
    assert [d.is_today for d in days].index(True) == 3


def test_weekly_activity_empty_has_labels():
    days = weekly_activity([], TODAY)
    assert len(days) == 7
    assert days[0].day == "Sun"
    assert all(d.value == 0 for d in days)

    monday_first = weekly_activity([], TODAY, week_start_day=1)
    assert monday_first[0].day == "Mon"
    assert monday_first[-1].day == "Sun"


def test_weekly_activity_single_habit():
    days = weekly_activity(_sample_habits(), TODAY, habit_id="3")
    assert [d.value for d in days[:4]] == [0, 100, 0, 100]


def test_total_stats():
    habits = [_habit("a", ["2024-06-02", "2024-06-03"]), _habit("b", ["2024-06-03"])]
    totals = total_stats(habits)
    assert totals.total_habits == 2
    assert totals.total_completions == 3
    assert totals.perfect_days == 1
    assert totals.avg_daily_completion == 75


def test_total_stats_empty():
    assert total_stats([]).to_dict()["totalHabits"] == 0


def test_best_days_analysis():
    days = best_days_analysis([_habit("a", ["2024-06-02"])], TODAY)
    assert len(days) == 7
    assert days[0].day == "Sunday"
    assert days[0].completion_rate == 13  # 1 of 8 Sundays
    assert all(d.completion_rate == 0 for d in days[1:])
    assert [d.is_weekend for d in days] == [True, False, False, False, False, False, True]


def test_habit_performance_sorted_and_classified():
    rows = habit_performance(_sample_habits(), "week", TODAY)
    assert [r.habit.name for r in rows] == ["Read", "Gym", "Meditate"]
    assert [r.completion_rate for r in rows] == [100, 100, 75]
    assert [r.status for r in rows] == ["excellent", "excellent", "good"]
    assert rows[1].possible_count == 2


def test_habit_performance_caps_rate():
    habits = [_habit("a", ["2024-06-02", "2024-06-03", "2024-06-04"], frequency="weekly", days_per_week=1)]
    row = habit_performance(habits, "week", TODAY)[0]
    assert row.completed_count == 3
    assert row.possible_count == 1
    assert row.completion_rate == 100
    assert row.status == "excellent"


def test_monthly_heatmap_grid():
    cells = monthly_heatmap(_sample_habits(), TODAY)
    assert len(cells) == 35
    assert cells[0].date == (date(2024, 6, 5) - timedelta(days=34)).isoformat()
    assert cells[-1].date == TODAY
    assert cells[-1].week_index == 4
    assert cells[-1].day_index == 6
    assert cells[-1].completion_rate == 100


def test_monthly_heatmap_empty():
    assert monthly_heatmap([], TODAY) == []


def test_daily_precision():
    habits = [_habit("a", ["2024-06-02", "2024-06-03", "2024-06-04", "2024-06-05"]), _habit("b", ["2024-06-03", "2024-06-05"])]
    assert daily_precision(habits, "week", TODAY) == 50


# ── Insights ──────────────────────────────────────────────────


def test_insights_without_habits():
    insights = generate_insights([], TODAY)
    assert len(insights) == 1
    assert insights[0].title == "Get Started"


def test_insights_long_streak():
    dates = [d.isoformat() for d in iter_days(date(2024, 5, 30), date(2024, 6, 5))]
    insights = generate_insights([_habit("a", dates)], TODAY)
    titles = [i.title for i in insights]
    assert "Amazing Streak!" in titles
    assert "Perfect Day Master" in titles
    assert len(insights) <= 4


def test_insights_flag_struggling_habit():
    habits = [_habit("a", ["2024-06-05"], name="Stretch")]
    titles = [i.title for i in generate_insights(habits, TODAY)]
    assert "Focus on Stretch" in titles
