"""Habit CRUD, validation, legacy normalization and the completion store.

A habit's ``completedDates`` map is the single source of truth for
progress. Every mutation goes through :meth:`Habit.recompute` so the derived
``completedDays``/``totalProgress``/``percentComplete`` fields never drift.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from habitcore.categories import get_category
from habitcore.dates import parse_date
from habitcore.fileio import read_json, write_json_atomic
from habitcore.models import CATEGORIES, FREQUENCIES, METRIC_TYPES, Habit, HabitsFile
from habitcore.workspace import habits_path

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# Keys derived from completedDates; callers may not set them directly.
DERIVED_FIELDS = {"completedDays", "percentComplete", "totalProgress"}


# ── Validation ────────────────────────────────────────────────


def validate_habit(habit: dict[str, Any]) -> list[str]:
    """Validate a camelCase habit payload and return errors (empty if valid)."""
    errors = []
    name = habit.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Missing required field: name")

    goal = habit.get("goal")
    if goal is not None and (isinstance(goal, bool) or not isinstance(goal, (int, float)) or goal <= 0):
        errors.append("goal must be a positive number")

    if "metricType" in habit and habit["metricType"] not in METRIC_TYPES:
        errors.append(f"Invalid metric type: {habit['metricType']}")
    if "frequency" in habit and habit["frequency"] not in FREQUENCIES:
        errors.append(f"Invalid frequency: {habit['frequency']}")
    if "category" in habit and habit["category"] not in CATEGORIES:
        errors.append(f"Invalid category: {habit['category']}")

    if "daysPerWeek" in habit:
        dpw = habit["daysPerWeek"]
        if isinstance(dpw, bool) or not isinstance(dpw, int) or dpw < 1 or dpw > 7:
            errors.append("daysPerWeek must be integer 1-7")

    time_str = habit.get("notificationTime")
    if time_str is not None and not (isinstance(time_str, str) and _TIME_RE.match(time_str)):
        errors.append("notificationTime must be HH:MM")

    day = habit.get("notificationDay")
    if day is not None:
        upper = 7 if habit.get("frequency") == "weekly" else 31
        if isinstance(day, bool) or not isinstance(day, int) or day < 1 or day > upper:
            errors.append(f"notificationDay must be integer 1-{upper}")

    return errors


# ── Legacy normalization ──────────────────────────────────────


def normalize_habit(raw: dict[str, Any]) -> tuple[dict[str, Any], bool]:
    """Bring a stored record up to the current shape.

    Older records kept goal/unit/type nested under ``target``. Returns the
    normalized dict and whether anything changed.
    """
    updated = dict(raw)
    modified = False

    target = updated.get("target")
    if isinstance(target, dict):
        if updated.get("goal") is None and target.get("value") is not None:
            updated["goal"] = target["value"]
        if updated.get("unit") is None and target.get("unit") is not None:
            updated["unit"] = target["unit"]
        if updated.get("metricType") is None and target.get("type") is not None:
            updated["metricType"] = "count" if target["type"] == "count" else "boolean"
        modified = True
    if "target" in updated:
        del updated["target"]
        modified = True

    if updated.get("goal") is None:
        updated["goal"] = 1
        modified = True
    if not updated.get("unit"):
        updated["unit"] = "times"
        modified = True
    if not updated.get("metricType"):
        updated["metricType"] = "boolean"
        modified = True
    if not updated.get("frequency"):
        updated["frequency"] = "daily"
        modified = True

    if modified:
        logger.info("Migrated habit %s to current structure", updated.get("id", "?"))
    return updated, modified


def normalize_habits(items: list[Any]) -> tuple[HabitsFile, bool]:
    """Normalize all stored records; the flag is True when a re-save is due."""
    habits = []
    for raw in items:
        if not isinstance(raw, dict):
            continue
        normalized, _ = normalize_habit(raw)
        habits.append(Habit.from_dict(normalized))
    habits_file = HabitsFile(habits=habits)
    changed = json.dumps(habits_file.to_list(), sort_keys=True) != json.dumps(items, sort_keys=True)
    return habits_file, changed


# ── Persistence ───────────────────────────────────────────────


def load_habits(root: Path | None = None) -> HabitsFile:
    """Load habits.json; unreadable data degrades to an empty collection."""
    path = habits_path(root)
    try:
        data = read_json(path, default=[])
    except (json.JSONDecodeError, OSError) as e:
        logger.error("Error reading habits from %s: %s", path, e)
        return HabitsFile()
    habits_file, _ = normalize_habits(data if isinstance(data, list) else [])
    return habits_file


def save_habits(habits_file: HabitsFile, root: Path | None = None) -> None:
    path = habits_path(root)
    try:
        write_json_atomic(path, habits_file.to_list())
    except OSError as e:
        logger.error("Error saving habits to %s: %s", path, e)
        raise


# ── CRUD ──────────────────────────────────────────────────────


def find_habit(habits_file: HabitsFile, habit_id: str) -> Habit | None:
    for h in habits_file.habits:
        if h.id == habit_id:
            return h
    return None


def _new_habit_id(habits_file: HabitsFile, now: datetime) -> str:
    candidate = int(now.timestamp() * 1000)
    while find_habit(habits_file, str(candidate)):
        candidate += 1
    return str(candidate)


def create_habit(
    habits_file: HabitsFile, habit_data: dict[str, Any], now: datetime
) -> tuple[Habit, list[str]]:
    """Create and add a new habit. Returns (habit, errors).

    Missing icon, metric, unit and goal are filled from the category preset.
    """
    data = {k: v for k, v in habit_data.items() if k not in DERIVED_FIELDS}
    preset = get_category(data.get("category", "custom"))
    if preset is not None:
        data.setdefault("icon", preset.emoji)
        data.setdefault("metricType", preset.default_metric)
        data.setdefault("unit", preset.default_unit)
        data.setdefault("goal", preset.default_goal)

    errors = validate_habit(data)
    if errors:
        return Habit(), errors

    data["id"] = _new_habit_id(habits_file, now)
    data["completedDates"] = {}
    data["createdAt"] = now.isoformat(timespec="seconds")
    data.pop("notificationId", None)

    habit = Habit.from_dict(data)
    habits_file.habits.append(habit)
    return habit, []


def update_habit(
    habits_file: HabitsFile, habit_id: str, updates: dict[str, Any]
) -> tuple[Habit | None, list[str]]:
    """Merge *updates* into a habit. Returns (updated_habit, errors)."""
    habit = find_habit(habits_file, habit_id)
    if not habit:
        return None, [f"Habit not found: {habit_id}"]

    merged = habit.to_dict()
    merged.update({k: v for k, v in updates.items() if k not in DERIVED_FIELDS and k != "id"})

    errors = validate_habit(merged)
    if errors:
        return None, errors

    updated = Habit.from_dict(merged)
    for i, h in enumerate(habits_file.habits):
        if h.id == habit_id:
            habits_file.habits[i] = updated
            break
    return updated, []


def delete_habit(habits_file: HabitsFile, habit_id: str) -> Habit | None:
    """Remove a habit, returning it so callers can cancel its reminders."""
    for i, h in enumerate(habits_file.habits):
        if h.id == habit_id:
            return habits_file.habits.pop(i)
    return None


# ── Completion store ──────────────────────────────────────────


def _is_future(day: str, today: str) -> bool:
    return day > today


def record_progress(
    habits_file: HabitsFile, habit_id: str, day: str, value: float, today: str
) -> Habit | None:
    """Record *value* for *day*. Non-positive values clear the day.

    Future days are rejected as a no-op (returns None).
    """
    if parse_date(day) is None:
        logger.warning("Ignoring progress for invalid date %r", day)
        return None
    if _is_future(day, today):
        logger.warning("Cannot record progress for future date %s", day)
        return None
    habit = find_habit(habits_file, habit_id)
    if habit is None:
        return None

    if value <= 0:
        habit.completed_dates.pop(day, None)
    else:
        habit.completed_dates[day] = value
    habit.recompute()
    return habit


def toggle_date_completion(
    habits_file: HabitsFile, habit_id: str, day: str, today: str
) -> Habit | None:
    """Clear a completed day, or mark it done with the habit's goal."""
    habit = find_habit(habits_file, habit_id)
    if habit is None:
        return None
    value = 0 if habit.is_done_on(day) else habit.goal
    return record_progress(habits_file, habit_id, day, value, today)


def mark_habit_done(habits_file: HabitsFile, habit_id: str, today: str) -> Habit | None:
    """Toggle today: boolean habits record 1, measured habits record their goal."""
    habit = find_habit(habits_file, habit_id)
    if habit is None:
        return None
    value = 1 if habit.metric_type == "boolean" else habit.goal
    if habit.is_done_on(today):
        value = 0
    return record_progress(habits_file, habit_id, today, value, today)
