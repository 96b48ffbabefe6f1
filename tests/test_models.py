"""Tests for habitcore/models.py: dataclass serialization and derived fields."""

from habitcore.categories import CATEGORY_PRESETS, get_category
from habitcore.models import CATEGORIES, Habit, HabitsFile, Note, Reminder, Settings


def test_habit_from_dict_derives_fields():
    habit = Habit.from_dict({
        "id": "1",
        "name": "Walk",
        "goal": 5000,
        "unit": "steps",
        "metricType": "steps",
        "completedDates": {"2024-06-01": 6000, "2024-06-02": 4000, "2024-06-03": 0},
        "completedDays": 99,
        "percentComplete": 99,
    })
    assert habit.completed_dates == {"2024-06-01": 6000, "2024-06-02": 4000}
    assert habit.completed_days == 2
    assert habit.total_progress == 10000
    assert habit.percent_complete == 1  # 2/365


def test_habit_drops_non_numeric_values():
    habit = Habit.from_dict({"id": "1", "completedDates": {"2024-06-01": "yes", "2024-06-02": True, "2024-06-03": -1}})
    assert habit.completed_dates == {"2024-06-02": 1}


def test_habit_drops_malformed_date_keys():
    habit = Habit.from_dict({"id": "1", "completedDates": {"2024-06-01junk": 1, "2024-06-02": 1, "junk": 1}})
    assert habit.completed_dates == {"2024-06-02": 1}
    assert habit.completed_days == 1


def test_habit_malformed_numbers_use_defaults():
    habit = Habit.from_dict({"id": "1", "daysPerWeek": "three", "notificationDay": [2], "notificationTime": 730})
    assert habit.days_per_week == 7
    assert habit.notification_day is None
    assert habit.notification_time is None
    assert Habit.from_dict({"id": "1", "daysPerWeek": "3", "notificationDay": 4.0}).days_per_week == 3


def test_percent_complete_caps_at_100():
    dates = {f"2023-{m:02d}-{d:02d}": 1 for m in range(1, 13) for d in range(1, 29)}
    dates.update({f"2024-01-{d:02d}": 1 for d in range(1, 32)})
    habit = Habit.from_dict({"id": "1", "completedDates": dates})
    assert habit.completed_days > 365
    assert habit.percent_complete == 100


def test_habit_to_dict_camel_case():
    habit = Habit.from_dict({
        "id": "1",
        "name": "Read",
        "metricType": "minutes",
        "goal": 30,
        "daysPerWeek": 5,
        "notificationTime": "08:00",
    })
    d = habit.to_dict()
    assert d["metricType"] == "minutes"
    assert d["daysPerWeek"] == 5
    assert d["notificationTime"] == "08:00"
    assert "notificationDay" not in d
    assert "notificationId" not in d


def test_habits_file_from_list_skips_garbage():
    hf = HabitsFile.from_list([{"id": "1", "name": "A"}, "junk", None])
    assert [h.id for h in hf.habits] == ["1"]
    assert HabitsFile.from_list({"not": "a list"}).habits == []


def test_note_ignores_unknown_mood():
    note = Note.from_dict({"id": "1_2024-06-01", "habitId": "1", "date": "2024-06-01", "mood": "ecstatic"})
    assert note.mood is None
    assert not note.has_content()
    assert "mood" not in note.to_dict()


def test_note_has_content_trims():
    assert not Note(content="   \n").has_content()
    assert Note(content=" ok ").has_content()


def test_settings_defaults():
    s = Settings.from_dict({})
    assert s.week_start_day == 0
    assert s.theme == "dark"
    assert s.default_notification_time == "09:00"
    assert s.global_notifications_enabled is True
    assert s.has_completed_onboarding is False


def test_settings_rejects_invalid_values():
    s = Settings.from_dict({"weekStartDay": 4, "theme": "neon", "userName": "Sam"})
    assert s.week_start_day == 0
    assert s.theme == "dark"
    assert s.user_name == "Sam"


def test_reminder_to_dict():
    r = Reminder(id="r1", habit_id="1", trigger="weekly", hour=7, minute=30, weekday=2)
    d = r.to_dict()
    assert d["habitId"] == "1"
    assert d["weekday"] == 2
    assert "fireAt" not in d
    assert Reminder.from_dict(d) == r


def test_reminder_from_dict_malformed_time():
    r = Reminder.from_dict({"id": "r1", "hour": "seven", "minute": None, "weekday": "x"})
    assert (r.hour, r.minute, r.weekday) == (9, 0, None)


def test_category_presets_cover_every_category():
    assert [c.id for c in CATEGORY_PRESETS] == list(CATEGORIES)
    reading = get_category("reading")
    assert reading is not None
    assert get_category("nope") is None
