"""Mood trend series built from journal notes.

Moods map onto a 1-5 scale (terrible=1 ... great=5). Each bucket holds the
rounded average of the moods recorded in it; 0 marks an empty bucket and is
not a mood.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import timedelta
from typing import Iterable

from habitcore.dates import SHORT_DAY_NAMES, SHORT_MONTH_NAMES, js_weekday, parse_date
from habitcore.models import MOOD_VALUES, MoodPoint, Note
from habitcore.rating import round_half_up

WINDOW_DAYS = {"week": 7, "month": 30}
MONTH_LABEL_EVERY = 6


def _average(values: list[int]) -> int:
    return round_half_up(sum(values) / len(values)) if values else 0


def mood_trend(notes: Iterable[Note], period: str, today: str) -> list[MoodPoint]:
    """Daily buckets for week (7 days) and month (30 days); monthly buckets for year."""
    today_d = parse_date(today)
    if today_d is None:
        return []
    if period not in WINDOW_DAYS and period != "year":
        raise ValueError(f"Invalid period: {period!r}")

    by_day: dict[str, list[int]] = defaultdict(list)
    by_month: dict[tuple[int, int], list[int]] = defaultdict(list)
    for note in notes:
        if note.mood not in MOOD_VALUES:
            continue
        d = parse_date(note.date)
        if d is None:
            continue
        by_day[d.isoformat()].append(MOOD_VALUES[note.mood])
        by_month[(d.year, d.month)].append(MOOD_VALUES[note.mood])

    if period == "year":
        return [
            MoodPoint(
                value=_average(by_month.get((today_d.year, month), [])),
                date=f"{today_d.year}-{month:02d}",
                label=SHORT_MONTH_NAMES[month - 1],
                index=month - 1,
            )
            for month in range(1, 13)
        ]

    span = WINDOW_DAYS[period] - 1
    points = []
    for i in range(span, -1, -1):
        d = today_d - timedelta(days=i)
        if period == "week":
            label = SHORT_DAY_NAMES[js_weekday(d)]
        else:
            label = str(d.day) if i % MONTH_LABEL_EVERY == 0 else ""
        points.append(MoodPoint(
            value=_average(by_day.get(d.isoformat(), [])),
            date=d.isoformat(),
            label=label,
            index=span - i,
        ))
    return points
