"""Tests for habitcore/notes.py."""

from datetime import datetime, timezone

from habitcore.notes import (
    clear_all_notes,
    delete_note,
    get_note,
    has_note,
    load_notes,
    note_id,
    notes_by_habit,
    save_note,
    save_notes,
    validate_note_form,
)

NOW = datetime(2024, 6, 5, 20, 0, tzinfo=timezone.utc)
LATER = datetime(2024, 6, 5, 22, 30, tzinfo=timezone.utc)


def test_note_id():
    assert note_id("1001", "2024-06-05") == "1001_2024-06-05"


def test_load_notes(workspace):
    notes = load_notes(workspace)
    assert set(notes) == {"1001_2024-06-04", "1002_2024-06-05"}
    assert get_note(notes, "1001", "2024-06-04").mood == "good"


def test_load_notes_missing(tmp_path):
    assert load_notes(tmp_path) == {}


def test_has_note_ignores_blank_content(workspace):
    notes = load_notes(workspace)
    assert has_note(notes, "1001", "2024-06-04")
    save_note(notes, "1001", "2024-06-05", {"content": "   "}, NOW)
    assert not has_note(notes, "1001", "2024-06-05")
    assert not has_note(notes, "1003", "2024-06-05")


def test_notes_by_habit_newest_first():
    notes = {}
    save_note(notes, "1", "2024-06-01", {"content": "a"}, NOW)
    save_note(notes, "1", "2024-06-03", {"content": "b"}, NOW)
    save_note(notes, "2", "2024-06-02", {"content": "c"}, NOW)
    assert [n.date for n in notes_by_habit(notes, "1")] == ["2024-06-03", "2024-06-01"]


def test_save_note_keeps_created_at():
    notes = {}
    first, errors = save_note(notes, "1", "2024-06-05", {"content": "draft", "mood": "okay"}, NOW)
    assert errors == []
    second, _ = save_note(notes, "1", "2024-06-05", {"content": "final", "mood": "great"}, LATER)
    assert second.created_at == first.created_at == NOW.isoformat(timespec="seconds")
    assert second.updated_at == LATER.isoformat(timespec="seconds")
    assert notes["1_2024-06-05"].content == "final"


def test_save_note_with_images_and_tags():
    notes = {}
    form = {
        "content": "progress photo",
        "images": [{"id": "img1", "uri": "img_1.jpg", "createdAt": "2024-06-05T20:00:00"}],
        "tags": ["gym"],
    }
    note, errors = save_note(notes, "1", "2024-06-05", form, NOW)
    assert errors == []
    assert note.images[0].uri == "img_1.jpg"
    assert note.tags == ["gym"]


def test_validate_note_form():
    assert validate_note_form({"content": "ok", "mood": "bad"}) == []
    errors = validate_note_form({"content": 5, "mood": "ecstatic", "tags": "x", "images": "y"})
    assert len(errors) == 4


def test_save_note_invalid_date():
    notes = {}
    note, errors = save_note(notes, "1", "June 5th", {"content": "x"}, NOW)
    assert note is None
    assert errors == ["Invalid date: June 5th"]
    assert notes == {}


def test_delete_note_returns_removed():
    notes = {}
    save_note(notes, "1", "2024-06-05", {"content": "x"}, NOW)
    removed = delete_note(notes, "1", "2024-06-05")
    assert removed.content == "x"
    assert delete_note(notes, "1", "2024-06-05") is None


def test_save_and_clear_notes(workspace):
    notes = load_notes(workspace)
    save_note(notes, "1003", "2024-06-05", {"content": "leg day"}, NOW)
    save_notes(notes, workspace)
    assert get_note(load_notes(workspace), "1003", "2024-06-05").content == "leg day"

    clear_all_notes(workspace)
    assert load_notes(workspace) == {}
