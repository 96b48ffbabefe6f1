"""Shared test fixtures for habitline tests."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
import yaml


# Wednesday; the Sunday-anchored week holds 2024-06-02 .. 2024-06-05.
TODAY = "2024-06-05"

SAMPLE_HABITS = [
    {
        "id": "1001",
        "name": "Read",
        "icon": "📚",
        "category": "reading",
        "metricType": "minutes",
        "goal": 30,
        "unit": "minutes",
        "frequency": "daily",
        "daysPerWeek": 7,
        "completedDates": {
            "2024-06-01": 30,
            "2024-06-02": 30,
            "2024-06-03": 45,
            "2024-06-04": 30,
            "2024-06-05": 30,
        },
        "notificationEnabled": False,
        "createdAt": "2024-05-01T08:00:00+00:00",
    },
    {
        "id": "1002",
        "name": "Meditate",
        "icon": "🧘",
        "category": "meditation",
        "metricType": "boolean",
        "goal": 1,
        "unit": "times",
        "frequency": "daily",
        "daysPerWeek": 7,
        "completedDates": {"2024-06-03": 1, "2024-06-04": 1, "2024-06-05": 1},
        "notificationEnabled": True,
        "notificationTime": "07:30",
        "createdAt": "2024-05-01T08:00:00+00:00",
    },
    {
        "id": "1003",
        "name": "Gym",
        "icon": "💪",
        "category": "exercise",
        "metricType": "boolean",
        "goal": 1,
        "unit": "times",
        "frequency": "weekly",
        "daysPerWeek": 3,
        "completedDates": {"2024-06-03": 1, "2024-06-05": 1},
        "notificationEnabled": False,
        "createdAt": "2024-05-01T08:00:00+00:00",
    },
]

SAMPLE_NOTES = {
    "1001_2024-06-04": {
        "id": "1001_2024-06-04",
        "habitId": "1001",
        "date": "2024-06-04",
        "content": "Finished chapter 3",
        "mood": "good",
        "images": [],
        "createdAt": "2024-06-04T21:00:00+00:00",
        "updatedAt": "2024-06-04T21:00:00+00:00",
    },
    "1002_2024-06-05": {
        "id": "1002_2024-06-05",
        "habitId": "1002",
        "date": "2024-06-05",
        "content": "Calm session",
        "mood": "great",
        "images": [],
        "createdAt": "2024-06-05T07:45:00+00:00",
        "updatedAt": "2024-06-05T07:45:00+00:00",
    },
}


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary habits workspace with sample data."""
    root = tmp_path / "habits"
    root.mkdir()

    (root / "config.yaml").write_text(
        yaml.dump({"timezone": "UTC"}, default_flow_style=False), encoding="utf-8"
    )
    (root / "habits.json").write_text(json.dumps(SAMPLE_HABITS, indent=2), encoding="utf-8")
    (root / "notes.json").write_text(json.dumps(SAMPLE_NOTES, indent=2), encoding="utf-8")
    (root / "settings.json").write_text(
        json.dumps({"userName": "Sam", "weekStartDay": 0}, indent=2), encoding="utf-8"
    )

    os.environ["HABITS_ROOT"] = str(root)
    yield root
    if "HABITS_ROOT" in os.environ:
        del os.environ["HABITS_ROOT"]
