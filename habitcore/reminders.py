"""Reminder scheduling for habits.

Reminders are kept in a local registry (reminders.json) shaped like a
platform notification queue: repeating daily/weekly triggers and one-shot
dated triggers. Monthly habits have no repeating trigger, so the next few
months are scheduled as individual dated reminders on the chosen day,
clamped to the month's last day.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timedelta
from pathlib import Path

from habitcore.dates import days_in_month, js_weekday
from habitcore.fileio import read_json, write_json_atomic
from habitcore.models import Habit, Reminder
from habitcore.workspace import reminders_path

logger = logging.getLogger(__name__)

REMINDER_LIMIT = 64
REMINDER_WARNING_THRESHOLD = 55
MONTHS_AHEAD = 3
APP_REMINDER_ID = "app-daily-reminder"


# ── Persistence ───────────────────────────────────────────────


def load_reminders(root: Path | None = None) -> dict[str, Reminder]:
    path = reminders_path(root)
    try:
        data = read_json(path, default={})
    except (json.JSONDecodeError, OSError) as e:
        logger.error("Error reading reminders from %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        return {}
    return {k: Reminder.from_dict(v) for k, v in data.items() if isinstance(v, dict)}


def save_reminders(registry: dict[str, Reminder], root: Path | None = None) -> None:
    write_json_atomic(reminders_path(root), {k: r.to_dict() for k, r in registry.items()})


# ── Scheduling ────────────────────────────────────────────────


def _parse_time(time_str: str) -> tuple[int, int]:
    hours, minutes = time_str.split(":")
    return int(hours), int(minutes)


def check_reminder_limit(registry: dict[str, Reminder]) -> bool:
    """False once the registry is full; warns as it approaches the limit."""
    count = len(registry)
    if count >= REMINDER_LIMIT:
        logger.warning(
            "Reminder limit reached: %d scheduled (max %d)", count, REMINDER_LIMIT
        )
        return False
    if count >= REMINDER_WARNING_THRESHOLD:
        logger.warning(
            "Approaching reminder limit: %d scheduled (max %d)", count, REMINDER_LIMIT
        )
    return True


def _add(registry: dict[str, Reminder], reminder: Reminder) -> str:
    registry[reminder.id] = reminder
    return reminder.id


def _schedule_monthly(
    registry: dict[str, Reminder], habit: Habit, hour: int, minute: int, now: datetime
) -> str | None:
    day_of_month = habit.notification_day or 1
    ids = []
    for i in range(MONTHS_AHEAD + 1):
        year, month = divmod(now.year * 12 + now.month - 1 + i, 12)
        month += 1
        actual_day = min(day_of_month, days_in_month(year, month))
        target = now.replace(
            year=year, month=month, day=actual_day,
            hour=hour, minute=minute, second=0, microsecond=0,
        )
        if target <= now:
            continue
        ids.append(_add(registry, Reminder(
            id=uuid.uuid4().hex,
            habit_id=habit.id,
            title=f"{habit.icon} Monthly reminder: {habit.name}!",
            body="Don't forget your monthly habit!",
            trigger="date",
            hour=hour,
            minute=minute,
            fire_at=target.isoformat(timespec="minutes"),
        )))
        logger.info("Scheduled monthly reminder for %s on %s", habit.name, target.date())
    return ids[0] if ids else None


def schedule_habit_reminder(
    registry: dict[str, Reminder], habit: Habit, now: datetime
) -> str | None:
    """Schedule the habit's reminder; returns its id, or None if nothing was scheduled."""
    if not habit.notification_enabled or not habit.notification_time:
        return None
    if not check_reminder_limit(registry):
        return None
    try:
        hour, minute = _parse_time(habit.notification_time)
    except ValueError:
        logger.error("Invalid reminder time %r for habit %s", habit.notification_time, habit.id)
        return None

    if habit.frequency == "monthly":
        return _schedule_monthly(registry, habit, hour, minute, now)

    reminder = Reminder(
        id=uuid.uuid4().hex,
        habit_id=habit.id,
        title=f"{habit.icon} Time for {habit.name}!",
        body="Don't break your streak! Complete your habit now.",
        trigger="daily",
        hour=hour,
        minute=minute,
    )
    if habit.frequency == "weekly":
        reminder.trigger = "weekly"
        reminder.weekday = habit.notification_day or 1
    logger.info("Scheduled reminder %s for %s", reminder.id, habit.name)
    return _add(registry, reminder)


def cancel_reminder(registry: dict[str, Reminder], reminder_id: str) -> bool:
    removed = registry.pop(reminder_id, None)
    if removed is not None:
        logger.info("Cancelled reminder %s", reminder_id)
    return removed is not None


def cancel_habit_reminders(registry: dict[str, Reminder], habit_id: str) -> int:
    """Cancel every reminder belonging to a habit (all months of a monthly habit)."""
    ids = [rid for rid, r in registry.items() if r.habit_id == habit_id]
    for rid in ids:
        cancel_reminder(registry, rid)
    return len(ids)


def reschedule_all(
    registry: dict[str, Reminder], habits: list[Habit], now: datetime
) -> dict[str, str]:
    """Drop all habit reminders and schedule them again. Returns habit id -> reminder id."""
    for rid in [rid for rid, r in registry.items() if r.habit_id is not None]:
        del registry[rid]
    mapping = {}
    for habit in habits:
        rid = schedule_habit_reminder(registry, habit, now)
        if rid:
            mapping[habit.id] = rid
    logger.info("Re-scheduled %d reminders", len(mapping))
    return mapping


def schedule_app_daily_reminder(registry: dict[str, Reminder], time_str: str) -> bool:
    """(Re)schedule the single app-wide "check your habits" reminder."""
    try:
        hour, minute = _parse_time(time_str)
    except ValueError:
        logger.error("Invalid app reminder time %r", time_str)
        return False
    registry[APP_REMINDER_ID] = Reminder(
        id=APP_REMINDER_ID,
        title="\U0001F31F Time to check your habits!",
        body="Stay consistent and build your streak. You've got this!",
        trigger="daily",
        hour=hour,
        minute=minute,
    )
    return True


def cancel_app_daily_reminder(registry: dict[str, Reminder]) -> bool:
    return cancel_reminder(registry, APP_REMINDER_ID)


# ── Queries ───────────────────────────────────────────────────


def next_fire_time(reminder: Reminder, now: datetime) -> datetime | None:
    """When the reminder fires next after *now*; None for a spent dated reminder."""
    if reminder.trigger == "date":
        if not reminder.fire_at:
            return None
        fire_at = datetime.fromisoformat(reminder.fire_at)
        if fire_at.tzinfo is None and now.tzinfo is not None:
            fire_at = fire_at.replace(tzinfo=now.tzinfo)
        return fire_at if fire_at > now else None

    candidate = now.replace(hour=reminder.hour, minute=reminder.minute, second=0, microsecond=0)
    if reminder.trigger == "weekly":
        target = ((reminder.weekday or 1) - 1) % 7
        candidate += timedelta(days=(target - js_weekday(now.date())) % 7)
        if candidate <= now:
            candidate += timedelta(days=7)
        return candidate
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def reminders_for_habit(registry: dict[str, Reminder], habit_id: str) -> list[Reminder]:
    return [r for r in registry.values() if r.habit_id == habit_id]
