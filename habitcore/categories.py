"""Habit category presets: emoji plus default metric, unit and goal."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CategoryConfig:
    id: str
    name: str
    emoji: str
    default_metric: str
    default_unit: str
    default_goal: float
    description: str


CATEGORY_PRESETS: list[CategoryConfig] = [
    CategoryConfig("exercise", "Exercise", "\U0001F3C3", "minutes", "minutes", 30, "Running, Gym, Yoga"),
    CategoryConfig("walking", "Walking", "\U0001F6B6", "steps", "steps", 10000, "Daily steps goal"),
    CategoryConfig("reading", "Reading", "\U0001F4DA", "minutes", "minutes", 30, "Books, articles"),
    CategoryConfig("meditation", "Meditation", "\U0001F9D8", "minutes", "minutes", 10, "Mindfulness practice"),
    CategoryConfig("water", "Water", "\U0001F4A7", "count", "glasses", 8, "Stay hydrated"),
    CategoryConfig("sleep", "Sleep", "\U0001F634", "hours", "hours", 8, "Rest and recovery"),
    CategoryConfig("work", "Work", "\U0001F4BC", "hours", "hours", 8, "Focused work time"),
    CategoryConfig("learning", "Learning", "\U0001F393", "minutes", "minutes", 30, "Courses, practice"),
    CategoryConfig("health", "Health", "❤️", "boolean", "times", 1, "Vitamins, checkups"),
    CategoryConfig("custom", "Custom", "✨", "count", "times", 1, "Anything else"),
]

_BY_ID = {c.id: c for c in CATEGORY_PRESETS}


def get_category(category_id: str) -> CategoryConfig | None:
    return _BY_ID.get(category_id)
