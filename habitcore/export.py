"""Export the habit collection to shareable JSON and CSV documents."""

from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from habitcore.fileio import write_json_atomic
from habitcore.habits import load_habits
from habitcore.models import Habit
from habitcore.workspace import exports_dir

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


def build_export(habits: list[Habit], now: datetime) -> dict[str, Any]:
    return {
        "habits": [h.to_dict() for h in habits],
        "exportedAt": now.isoformat(timespec="seconds"),
        "version": APP_VERSION,
    }


def write_export(root: Path | None = None, now: datetime | None = None) -> Path:
    """Write exports/habits_export_<date>.json and return its path."""
    if now is None:
        now = datetime.now()
    habits_file = load_habits(root)
    path = exports_dir(root) / f"habits_export_{now.date().isoformat()}.json"
    write_json_atomic(path, build_export(habits_file.habits, now))
    logger.info("Exported %d habits to %s", len(habits_file.habits), path)
    return path


def write_completions_csv(root: Path | None = None, now: datetime | None = None) -> Path:
    """One row per recorded completion: habit id, name, date, value, unit."""
    if now is None:
        now = datetime.now()
    habits_file = load_habits(root)
    target_dir = exports_dir(root)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / f"completions_{now.date().isoformat()}.csv"
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["habitId", "name", "date", "value", "unit"])
        for habit in habits_file.habits:
            for day in sorted(habit.completed_dates):
                writer.writerow([habit.id, habit.name, day, habit.completed_dates[day], habit.unit])
    logger.info("Exported completions to %s", path)
    return path
