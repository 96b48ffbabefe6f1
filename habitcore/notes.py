"""Per-habit, per-day journal notes keyed ``<habitId>_<date>``."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from habitcore.dates import parse_date
from habitcore.fileio import read_json, remove_file, write_json_atomic
from habitcore.models import MOOD_VALUES, Note, NoteImage
from habitcore.workspace import notes_path

logger = logging.getLogger(__name__)


def note_id(habit_id: str, day: str) -> str:
    return f"{habit_id}_{day}"


# ── Persistence ───────────────────────────────────────────────


def load_notes(root: Path | None = None) -> dict[str, Note]:
    path = notes_path(root)
    try:
        data = read_json(path, default={})
    except (json.JSONDecodeError, OSError) as e:
        logger.error("Error reading notes from %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        return {}
    return {k: Note.from_dict(v) for k, v in data.items() if isinstance(v, dict)}


def save_notes(notes: dict[str, Note], root: Path | None = None) -> None:
    path = notes_path(root)
    try:
        write_json_atomic(path, {k: n.to_dict() for k, n in notes.items()})
    except OSError as e:
        logger.error("Error saving notes to %s: %s", path, e)
        raise


def clear_all_notes(root: Path | None = None) -> None:
    remove_file(notes_path(root))


# ── Accessors ─────────────────────────────────────────────────


def get_note(notes: dict[str, Note], habit_id: str, day: str) -> Note | None:
    return notes.get(note_id(habit_id, day))


def has_note(notes: dict[str, Note], habit_id: str, day: str) -> bool:
    """True only when a note exists and its content is not blank."""
    note = get_note(notes, habit_id, day)
    return note is not None and note.has_content()


def notes_by_habit(notes: dict[str, Note], habit_id: str) -> list[Note]:
    return sorted(
        (n for n in notes.values() if n.habit_id == habit_id),
        key=lambda n: n.date,
        reverse=True,
    )


def validate_note_form(form: dict[str, Any]) -> list[str]:
    errors = []
    if not isinstance(form.get("content", ""), str):
        errors.append("content must be text")
    mood = form.get("mood")
    if mood is not None and mood not in MOOD_VALUES:
        errors.append(f"Invalid mood: {mood}")
    tags = form.get("tags")
    if tags is not None and not (isinstance(tags, list) and all(isinstance(t, str) for t in tags)):
        errors.append("tags must be a list of strings")
    images = form.get("images")
    if images is not None and not isinstance(images, list):
        errors.append("images must be a list")
    return errors


def save_note(
    notes: dict[str, Note],
    habit_id: str,
    day: str,
    form: dict[str, Any],
    now: datetime,
) -> tuple[Note | None, list[str]]:
    """Create or replace the note for (habit, day). Returns (note, errors).

    ``createdAt`` survives edits; ``updatedAt`` is always bumped.
    """
    errors = validate_note_form(form)
    if parse_date(day) is None:
        errors.append(f"Invalid date: {day}")
    if errors:
        return None, errors

    nid = note_id(habit_id, day)
    stamp = now.isoformat(timespec="seconds")
    existing = notes.get(nid)
    images = []
    for img in form.get("images") or []:
        if isinstance(img, NoteImage):
            images.append(img)
        elif isinstance(img, dict):
            images.append(NoteImage.from_dict(img))

    note = Note(
        id=nid,
        habit_id=habit_id,
        date=day,
        content=form.get("content", "") or "",
        mood=form.get("mood"),
        images=images,
        tags=form.get("tags"),
        created_at=existing.created_at if existing and existing.created_at else stamp,
        updated_at=stamp,
    )
    notes[nid] = note
    return note, []


def delete_note(notes: dict[str, Note], habit_id: str, day: str) -> Note | None:
    """Remove a note, returning it so its images can be cleaned up."""
    return notes.pop(note_id(habit_id, day), None)
