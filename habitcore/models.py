"""Typed dataclasses for the habitline data model.

All persisted models use from_dict/to_dict for JSON serialization.
camelCase on disk is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from habitcore.dates import parse_date
from habitcore.rating import round_half_up


# ── Closed value sets ─────────────────────────────────────────

CATEGORIES = (
    "exercise", "walking", "reading", "meditation", "water",
    "sleep", "work", "learning", "health", "custom",
)
METRIC_TYPES = ("steps", "minutes", "hours", "count", "boolean")
FREQUENCIES = ("daily", "weekly", "monthly")
PERIODS = ("week", "month", "year")
THEMES = ("dark", "light")

MOOD_VALUES: dict[str, int] = {
    "great": 5,
    "good": 4,
    "okay": 3,
    "bad": 2,
    "terrible": 1,
}
VALUE_TO_MOOD = {v: k for k, v in MOOD_VALUES.items()}
MOOD_EMOJIS = {
    "great": "\U0001F60A",
    "good": "\U0001F642",
    "okay": "\U0001F610",
    "bad": "\U0001F614",
    "terrible": "\U0001F622",
}

DAYS_PER_YEAR = 365


def _int_or(value: Any, default: Any) -> Any:
    """Coerce a stored integer field, falling back to *default* on garbage."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _clean_completed_dates(raw: Any) -> dict[str, float]:
    """Keep only numeric, positive entries keyed by a YYYY-MM-DD date. Legacy booleans count as 1."""
    if not isinstance(raw, dict):
        return {}
    out: dict[str, float] = {}
    for day, value in raw.items():
        if parse_date(str(day)) is None:
            continue
        if isinstance(value, bool):
            value = 1 if value else 0
        try:
            number = float(value)
        except (TypeError, ValueError):
            continue
        if number > 0:
            out[str(day)] = int(number) if number.is_integer() else number
    return out


# ── Habits ────────────────────────────────────────────────────


@dataclass
class Habit:
    id: str = ""
    name: str = ""
    icon: str = ""
    category: str = "custom"
    metric_type: str = "boolean"
    goal: float = 1
    unit: str = "times"
    frequency: str = "daily"  # daily, weekly, monthly
    days_per_week: int = 7
    completed_days: int = 0
    percent_complete: int = 0
    total_progress: float = 0
    completed_dates: dict[str, float] = field(default_factory=dict)
    notification_enabled: bool = False
    notification_time: str | None = None  # HH:MM
    notification_day: int | None = None  # weekly: 1-7 (Sun-Sat), monthly: 1-31
    notification_id: str | None = None
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Habit:
        goal = d.get("goal", 1)
        days_per_week = _int_or(d.get("daysPerWeek"), 7)
        habit = cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            icon=str(d.get("icon", "")),
            category=str(d.get("category", "custom") or "custom"),
            metric_type=str(d.get("metricType", "boolean") or "boolean"),
            goal=goal if isinstance(goal, (int, float)) and not isinstance(goal, bool) and goal > 0 else 1,
            unit=str(d.get("unit", "times") or "times"),
            frequency=str(d.get("frequency", "daily") or "daily"),
            days_per_week=days_per_week if 1 <= days_per_week <= 7 else 7,
            completed_dates=_clean_completed_dates(d.get("completedDates")),
            notification_enabled=bool(d.get("notificationEnabled", False)),
            notification_time=_str_or_none(d.get("notificationTime")),
            notification_day=_int_or(d.get("notificationDay"), None),
            notification_id=_str_or_none(d.get("notificationId")),
            created_at=str(d.get("createdAt", "")),
        )
        habit.recompute()
        return habit

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "category": self.category,
            "metricType": self.metric_type,
            "goal": self.goal,
            "unit": self.unit,
            "frequency": self.frequency,
            "daysPerWeek": self.days_per_week,
            "completedDays": self.completed_days,
            "percentComplete": self.percent_complete,
            "totalProgress": self.total_progress,
            "completedDates": dict(self.completed_dates),
            "notificationEnabled": self.notification_enabled,
            "createdAt": self.created_at,
        }
        if self.notification_time is not None:
            d["notificationTime"] = self.notification_time
        if self.notification_day is not None:
            d["notificationDay"] = self.notification_day
        if self.notification_id is not None:
            d["notificationId"] = self.notification_id
        return d

    def recompute(self) -> None:
        """Re-derive completed_days, total_progress and percent_complete."""
        self.completed_dates = {k: v for k, v in self.completed_dates.items() if v > 0}
        self.completed_days = len(self.completed_dates)
        self.total_progress = self.goal * self.completed_days
        self.percent_complete = min(100, round_half_up(self.completed_days / DAYS_PER_YEAR * 100))

    def is_done_on(self, day: str) -> bool:
        return self.completed_dates.get(day, 0) > 0


@dataclass
class HabitsFile:
    habits: list[Habit] = field(default_factory=list)

    @classmethod
    def from_list(cls, items: list[Any]) -> HabitsFile:
        if not isinstance(items, list):
            return cls()
        return cls(habits=[Habit.from_dict(h) for h in items if isinstance(h, dict)])

    def to_list(self) -> list[dict[str, Any]]:
        return [h.to_dict() for h in self.habits]


# ── Notes ─────────────────────────────────────────────────────


@dataclass
class NoteImage:
    id: str = ""
    uri: str = ""
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> NoteImage:
        return cls(
            id=str(d.get("id", "")),
            uri=str(d.get("uri", "")),
            created_at=str(d.get("createdAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "uri": self.uri, "createdAt": self.created_at}


@dataclass
class Note:
    id: str = ""
    habit_id: str = ""
    date: str = ""  # YYYY-MM-DD
    content: str = ""
    mood: str | None = None
    images: list[NoteImage] = field(default_factory=list)
    tags: list[str] | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Note:
        mood = d.get("mood")
        return cls(
            id=str(d.get("id", "")),
            habit_id=str(d.get("habitId", "")),
            date=str(d.get("date", "")),
            content=str(d.get("content", "") or ""),
            mood=mood if mood in MOOD_VALUES else None,
            images=[NoteImage.from_dict(i) for i in (d.get("images") or []) if isinstance(i, dict)],
            tags=list(d["tags"]) if isinstance(d.get("tags"), list) else None,
            created_at=str(d.get("createdAt", "")),
            updated_at=str(d.get("updatedAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "habitId": self.habit_id,
            "date": self.date,
            "content": self.content,
            "images": [i.to_dict() for i in self.images],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.mood is not None:
            d["mood"] = self.mood
        if self.tags is not None:
            d["tags"] = self.tags
        return d

    def has_content(self) -> bool:
        return bool(self.content.strip())


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    user_name: str = ""
    user_avatar: str = "\U0001F60A"
    global_notifications_enabled: bool = True
    default_notification_time: str = "09:00"
    week_start_day: int = 0  # 0 = Sunday, 1 = Monday
    theme: str = "dark"
    has_completed_onboarding: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        defaults = cls()
        week_start_day = d.get("weekStartDay", defaults.week_start_day)
        theme = d.get("theme", defaults.theme)
        return cls(
            user_name=str(d.get("userName", defaults.user_name)),
            user_avatar=str(d.get("userAvatar", defaults.user_avatar)),
            global_notifications_enabled=bool(
                d.get("globalNotificationsEnabled", defaults.global_notifications_enabled)
            ),
            default_notification_time=str(
                d.get("defaultNotificationTime", defaults.default_notification_time)
            ),
            week_start_day=week_start_day if week_start_day in (0, 1) else defaults.week_start_day,
            theme=theme if theme in THEMES else defaults.theme,
            has_completed_onboarding=bool(
                d.get("hasCompletedOnboarding", defaults.has_completed_onboarding)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "userName": self.user_name,
            "userAvatar": self.user_avatar,
            "globalNotificationsEnabled": self.global_notifications_enabled,
            "defaultNotificationTime": self.default_notification_time,
            "weekStartDay": self.week_start_day,
            "theme": self.theme,
            "hasCompletedOnboarding": self.has_completed_onboarding,
        }


# ── Reminders ─────────────────────────────────────────────────


@dataclass
class Reminder:
    id: str = ""
    habit_id: str | None = None  # None for the app-wide reminder
    title: str = ""
    body: str = ""
    trigger: str = "daily"  # daily, weekly, date
    hour: int = 9
    minute: int = 0
    weekday: int | None = None  # 1-7 (Sun-Sat), weekly only
    fire_at: str | None = None  # ISO datetime, date trigger only

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Reminder:
        return cls(
            id=str(d.get("id", "")),
            habit_id=d.get("habitId"),
            title=str(d.get("title", "")),
            body=str(d.get("body", "")),
            trigger=str(d.get("trigger", "daily")),
            hour=_int_or(d.get("hour"), 9),
            minute=_int_or(d.get("minute"), 0),
            weekday=_int_or(d.get("weekday"), None),
            fire_at=_str_or_none(d.get("fireAt")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "habitId": self.habit_id,
            "title": self.title,
            "body": self.body,
            "trigger": self.trigger,
            "hour": self.hour,
            "minute": self.minute,
        }
        if self.weekday is not None:
            d["weekday"] = self.weekday
        if self.fire_at is not None:
            d["fireAt"] = self.fire_at
        return d


# ── Analytics results ─────────────────────────────────────────


@dataclass
class StreakData:
    current: int = 0
    best: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"current": self.current, "best": self.best}


@dataclass
class PeriodComparison:
    current: int = 0
    previous: int = 0
    trend: str = "same"  # up, down, same

    def to_dict(self) -> dict[str, Any]:
        return {"current": self.current, "previous": self.previous, "trend": self.trend}


@dataclass
class DayActivity:
    day: str = ""
    value: int = 0
    is_today: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"day": self.day, "value": self.value, "isToday": self.is_today}


@dataclass
class DayStats:
    completed: int = 0
    total: int = 0
    percentage: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"completed": self.completed, "total": self.total, "percentage": self.percentage}


@dataclass
class MoodPoint:
    value: int = 0  # 0 means no mood recorded in this bucket
    date: str = ""
    label: str = ""
    index: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "date": self.date, "label": self.label, "index": self.index}


@dataclass
class TotalStats:
    total_habits: int = 0
    total_completions: int = 0
    perfect_days: int = 0
    avg_daily_completion: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalHabits": self.total_habits,
            "totalCompletions": self.total_completions,
            "perfectDays": self.perfect_days,
            "avgDailyCompletion": self.avg_daily_completion,
        }


@dataclass
class BestDay:
    day: str = ""
    short_day: str = ""
    completion_rate: int = 0
    is_weekend: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "shortDay": self.short_day,
            "completionRate": self.completion_rate,
            "isWeekend": self.is_weekend,
        }


@dataclass
class HabitPerformance:
    habit: Habit
    completion_rate: int = 0
    completed_count: int = 0
    possible_count: int = 0
    status: str = "poor"  # excellent, good, fair, poor

    def to_dict(self) -> dict[str, Any]:
        return {
            "habitId": self.habit.id,
            "name": self.habit.name,
            "completionRate": self.completion_rate,
            "completedCount": self.completed_count,
            "possibleCount": self.possible_count,
            "status": self.status,
        }


@dataclass
class HeatmapCell:
    date: str = ""
    day_of_month: int = 0
    completion_rate: int = 0
    week_index: int = 0
    day_index: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "dayOfMonth": self.day_of_month,
            "completionRate": self.completion_rate,
            "weekIndex": self.week_index,
            "dayIndex": self.day_index,
        }


@dataclass
class Insight:
    icon: str = ""
    title: str = ""
    description: str = ""
    type: str = "info"  # success, tip, warning, info

    def to_dict(self) -> dict[str, Any]:
        return {
            "icon": self.icon,
            "title": self.title,
            "description": self.description,
            "type": self.type,
        }
