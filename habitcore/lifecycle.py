"""Load-mutate-persist orchestration shared by the API and the TUI.

Each helper loads the collections it needs, applies one mutation from the
pure modules, keeps reminders and note attachments consistent, persists,
and then runs the matching lifecycle hook.

Order of operations for a habit change:
1. Load habits (and reminders/notes when touched)
2. Apply the mutation
3. Schedule or cancel reminders
4. Save
5. Run hooks
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from habitcore.fileio import read_json
from habitcore.habits import (
    create_habit,
    delete_habit,
    find_habit,
    load_habits,
    mark_habit_done,
    normalize_habits,
    record_progress,
    save_habits,
    toggle_date_completion,
    update_habit,
)
from habitcore.hooks import run_hooks
from habitcore.images import delete_image
from habitcore.models import Habit, HabitsFile, Note
from habitcore.notes import delete_note, get_note, load_notes, save_note, save_notes
from habitcore.reminders import (
    cancel_app_daily_reminder,
    cancel_habit_reminders,
    load_reminders,
    reschedule_all,
    save_reminders,
    schedule_app_daily_reminder,
    schedule_habit_reminder,
)
from habitcore.settings import load_settings
from habitcore.workspace import habits_path, now_local, workspace_root

logger = logging.getLogger(__name__)

NOTIFICATION_FIELDS = ("notificationEnabled", "notificationTime", "notificationDay", "frequency")


def load_workspace_habits(root: Path | None = None, now: datetime | None = None) -> HabitsFile:
    """Startup load: migrate legacy records, persist if needed, restore reminders."""
    if root is None:
        root = workspace_root()
    if now is None:
        now = now_local(root)

    path = habits_path(root)
    try:
        raw = read_json(path, default=[])
    except (json.JSONDecodeError, OSError) as e:
        logger.error("Error loading habits from %s: %s", path, e)
        return HabitsFile()

    habits_file, changed = normalize_habits(raw if isinstance(raw, list) else [])

    if habits_file.habits:
        registry = load_reminders(root)
        mapping = reschedule_all(registry, habits_file.habits, now)
        for habit in habits_file.habits:
            new_id = mapping.get(habit.id)
            if new_id != habit.notification_id:
                habit.notification_id = new_id
                changed = True
        save_reminders(registry, root)

    if changed:
        save_habits(habits_file, root)
    return habits_file


def add_habit(
    payload: dict[str, Any], root: Path | None = None, now: datetime | None = None
) -> tuple[Habit, list[str]]:
    if root is None:
        root = workspace_root()
    if now is None:
        now = now_local(root)

    habits_file = load_habits(root)
    habit, errors = create_habit(habits_file, payload, now)
    if errors:
        return habit, errors

    if habit.notification_enabled:
        registry = load_reminders(root)
        habit.notification_id = schedule_habit_reminder(registry, habit, now)
        save_reminders(registry, root)

    save_habits(habits_file, root)
    run_hooks("on_habit_create", {"habit": habit.to_dict()}, root)
    return habit, []


def edit_habit(
    habit_id: str,
    updates: dict[str, Any],
    root: Path | None = None,
    now: datetime | None = None,
) -> tuple[Habit | None, list[str]]:
    """Update a habit, rescheduling its reminder when notification fields change."""
    if root is None:
        root = workspace_root()
    if now is None:
        now = now_local(root)

    habits_file = load_habits(root)
    current = find_habit(habits_file, habit_id)
    if current is None:
        return None, [f"Habit not found: {habit_id}"]
    before = current.to_dict()

    updated, errors = update_habit(habits_file, habit_id, updates)
    if errors or updated is None:
        return None, errors

    after = updated.to_dict()
    if any(before.get(k) != after.get(k) for k in NOTIFICATION_FIELDS):
        registry = load_reminders(root)
        cancel_habit_reminders(registry, habit_id)
        updated.notification_id = schedule_habit_reminder(registry, updated, now)
        save_reminders(registry, root)

    save_habits(habits_file, root)
    run_hooks("on_habit_update", {"habit": updated.to_dict()}, root)
    return updated, []


def remove_habit(habit_id: str, root: Path | None = None) -> Habit | None:
    """Delete a habit with its reminders, notes and note images."""
    if root is None:
        root = workspace_root()

    habits_file = load_habits(root)
    removed = delete_habit(habits_file, habit_id)
    if removed is None:
        return None

    registry = load_reminders(root)
    if cancel_habit_reminders(registry, habit_id):
        save_reminders(registry, root)

    notes = load_notes(root)
    orphaned = [n for n in notes.values() if n.habit_id == habit_id]
    for note in orphaned:
        _delete_note_images(note, root)
        del notes[note.id]
    if orphaned:
        save_notes(notes, root)

    save_habits(habits_file, root)
    run_hooks("on_habit_delete", {"habit": removed.to_dict()}, root)
    return removed


# ── Completion ────────────────────────────────────────────────


def _after_progress(habit: Habit | None, day: str, habits_file: HabitsFile, root: Path) -> Habit | None:
    if habit is None:
        return None
    save_habits(habits_file, root)
    if habit.is_done_on(day):
        run_hooks(
            "on_habit_complete",
            {"habit": habit.to_dict(), "date": day, "value": habit.completed_dates[day]},
            root,
        )
    return habit


def complete_habit_today(habit_id: str, root: Path | None = None, today: str | None = None) -> Habit | None:
    """Toggle today's completion for a habit."""
    if root is None:
        root = workspace_root()
    if today is None:
        today = now_local(root).date().isoformat()
    habits_file = load_habits(root)
    habit = mark_habit_done(habits_file, habit_id, today)
    return _after_progress(habit, today, habits_file, root)


def set_progress(
    habit_id: str, day: str, value: float, root: Path | None = None, today: str | None = None
) -> Habit | None:
    if root is None:
        root = workspace_root()
    if today is None:
        today = now_local(root).date().isoformat()
    habits_file = load_habits(root)
    habit = record_progress(habits_file, habit_id, day, value, today)
    return _after_progress(habit, day, habits_file, root)


def toggle_day(habit_id: str, day: str, root: Path | None = None, today: str | None = None) -> Habit | None:
    if root is None:
        root = workspace_root()
    if today is None:
        today = now_local(root).date().isoformat()
    habits_file = load_habits(root)
    habit = toggle_date_completion(habits_file, habit_id, day, today)
    return _after_progress(habit, day, habits_file, root)


# ── Notes ─────────────────────────────────────────────────────


def _delete_note_images(note: Note, root: Path, keep: set[str] | None = None) -> None:
    for image in note.images:
        if keep and image.uri in keep:
            continue
        delete_image(image.uri, root)


def write_note(
    habit_id: str,
    day: str,
    form: dict[str, Any],
    root: Path | None = None,
    now: datetime | None = None,
) -> tuple[Note | None, list[str]]:
    """Save a note; images dropped from an edited note are deleted from disk."""
    if root is None:
        root = workspace_root()
    if now is None:
        now = now_local(root)
    if find_habit(load_habits(root), habit_id) is None:
        return None, [f"Habit not found: {habit_id}"]

    notes = load_notes(root)
    previous = get_note(notes, habit_id, day)
    note, errors = save_note(notes, habit_id, day, form, now)
    if errors or note is None:
        return None, errors

    if previous is not None:
        _delete_note_images(previous, root, keep={i.uri for i in note.images})
    save_notes(notes, root)
    run_hooks("on_note_save", {"note": note.to_dict()}, root)
    return note, []


def remove_note(habit_id: str, day: str, root: Path | None = None) -> bool:
    if root is None:
        root = workspace_root()
    notes = load_notes(root)
    removed = delete_note(notes, habit_id, day)
    if removed is None:
        return False
    _delete_note_images(removed, root)
    save_notes(notes, root)
    return True


# ── Settings side effects ─────────────────────────────────────


def apply_notification_settings(root: Path | None = None) -> bool:
    """Sync the app-wide daily reminder with the current settings. True if scheduled."""
    if root is None:
        root = workspace_root()
    settings = load_settings(root)
    registry = load_reminders(root)
    if settings.global_notifications_enabled:
        scheduled = schedule_app_daily_reminder(registry, settings.default_notification_time)
    else:
        cancel_app_daily_reminder(registry)
        scheduled = False
    save_reminders(registry, root)
    return scheduled
