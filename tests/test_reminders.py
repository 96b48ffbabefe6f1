"""Tests for habitcore/reminders.py: the local reminder registry."""

from datetime import datetime, timezone

from habitcore.models import Habit, Reminder
from habitcore.reminders import (
    APP_REMINDER_ID,
    REMINDER_LIMIT,
    cancel_app_daily_reminder,
    cancel_habit_reminders,
    check_reminder_limit,
    load_reminders,
    next_fire_time,
    reminders_for_habit,
    reschedule_all,
    save_reminders,
    schedule_app_daily_reminder,
    schedule_habit_reminder,
)

NOW = datetime(2024, 6, 5, 9, 0, tzinfo=timezone.utc)  # Wednesday


def _habit(frequency="daily", day=None, enabled=True, time="08:00", hid="1"):
    return Habit.from_dict({
        "id": hid,
        "name": "Stretch",
        "icon": "🤸",
        "frequency": frequency,
        "notificationEnabled": enabled,
        "notificationTime": time,
        "notificationDay": day,
    })


def test_daily_reminder():
    registry = {}
    rid = schedule_habit_reminder(registry, _habit(), NOW)
    reminder = registry[rid]
    assert reminder.trigger == "daily"
    assert (reminder.hour, reminder.minute) == (8, 0)
    assert reminder.habit_id == "1"
    assert "Stretch" in reminder.title


def test_weekly_reminder_uses_notification_day():
    registry = {}
    rid = schedule_habit_reminder(registry, _habit("weekly", day=2), NOW)
    assert registry[rid].trigger == "weekly"
    assert registry[rid].weekday == 2

    rid = schedule_habit_reminder(registry, _habit("weekly", hid="2"), NOW)
    assert registry[rid].weekday == 1


def test_monthly_reminders_clamp_to_month_end():
    registry = {}
    rid = schedule_habit_reminder(registry, _habit("monthly", day=31), NOW)
    fire_dates = sorted(r.fire_at[:10] for r in registry.values())
    assert fire_dates == ["2024-06-30", "2024-07-31", "2024-08-31", "2024-09-30"]
    assert registry[rid].fire_at.startswith("2024-06-30")


def test_monthly_reminders_skip_past_days():
    registry = {}
    schedule_habit_reminder(registry, _habit("monthly", day=3), NOW)
    fire_dates = sorted(r.fire_at[:10] for r in registry.values())
    assert fire_dates == ["2024-07-03", "2024-08-03", "2024-09-03"]


def test_disabled_or_untimed_habit_not_scheduled():
    registry = {}
    assert schedule_habit_reminder(registry, _habit(enabled=False), NOW) is None
    assert schedule_habit_reminder(registry, _habit(time=None), NOW) is None
    assert registry == {}


def test_reminder_limit():
    registry = {str(i): Reminder(id=str(i)) for i in range(REMINDER_LIMIT)}
    assert check_reminder_limit(registry) is False
    assert schedule_habit_reminder(registry, _habit(), NOW) is None
    assert len(registry) == REMINDER_LIMIT


def test_cancel_habit_reminders_removes_every_month():
    registry = {}
    schedule_habit_reminder(registry, _habit("monthly", day=15), NOW)
    schedule_habit_reminder(registry, _habit(hid="2"), NOW)
    assert cancel_habit_reminders(registry, "1") == 4
    assert reminders_for_habit(registry, "1") == []
    assert len(reminders_for_habit(registry, "2")) == 1


def test_reschedule_all_keeps_app_reminder():
    registry = {}
    schedule_app_daily_reminder(registry, "21:00")
    old = schedule_habit_reminder(registry, _habit(), NOW)
    mapping = reschedule_all(registry, [_habit(), _habit(enabled=False, hid="2")], NOW)
    assert APP_REMINDER_ID in registry
    assert old not in registry
    assert set(mapping) == {"1"}
    assert mapping["1"] in registry


def test_app_daily_reminder():
    registry = {}
    assert schedule_app_daily_reminder(registry, "20:15") is True
    assert (registry[APP_REMINDER_ID].hour, registry[APP_REMINDER_ID].minute) == (20, 15)
    assert schedule_app_daily_reminder(registry, "late") is False
    assert cancel_app_daily_reminder(registry) is True
    assert cancel_app_daily_reminder(registry) is False


def test_next_fire_time():
    daily = Reminder(id="d", trigger="daily", hour=7, minute=30)
    assert next_fire_time(daily, NOW) == datetime(2024, 6, 6, 7, 30, tzinfo=timezone.utc)

    later_today = Reminder(id="l", trigger="daily", hour=18, minute=0)
    assert next_fire_time(later_today, NOW) == datetime(2024, 6, 5, 18, 0, tzinfo=timezone.utc)

    sunday = Reminder(id="w", trigger="weekly", hour=7, minute=30, weekday=1)
    assert next_fire_time(sunday, NOW) == datetime(2024, 6, 9, 7, 30, tzinfo=timezone.utc)

    spent = Reminder(id="x", trigger="date", fire_at="2024-06-01T08:00+00:00")
    assert next_fire_time(spent, NOW) is None


def test_save_and_load_registry(workspace):
    registry = {}
    rid = schedule_habit_reminder(registry, _habit("weekly", day=3), NOW)
    save_reminders(registry, workspace)
    loaded = load_reminders(workspace)
    assert loaded[rid] == registry[rid]
