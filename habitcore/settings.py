"""App settings: one JSON blob merged over defaults."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from habitcore.fileio import read_json, remove_file, write_json_atomic
from habitcore.models import THEMES, Settings
from habitcore.workspace import settings_path

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = Settings()

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def load_settings(root: Path | None = None) -> Settings:
    """Stored values merged over defaults, so new fields pick up defaults."""
    path = settings_path(root)
    try:
        stored = read_json(path, default={})
    except (json.JSONDecodeError, OSError) as e:
        logger.error("Error loading settings from %s: %s", path, e)
        return Settings()
    merged = {**DEFAULT_SETTINGS.to_dict(), **(stored if isinstance(stored, dict) else {})}
    return Settings.from_dict(merged)


def save_settings(settings: Settings, root: Path | None = None) -> None:
    path = settings_path(root)
    try:
        write_json_atomic(path, settings.to_dict())
    except OSError as e:
        logger.error("Error saving settings to %s: %s", path, e)
        raise


def validate_settings_update(updates: dict[str, Any]) -> list[str]:
    errors = []
    known = set(DEFAULT_SETTINGS.to_dict())
    for key in updates:
        if key not in known:
            errors.append(f"Unknown setting: {key}")
    if "weekStartDay" in updates and updates["weekStartDay"] not in (0, 1):
        errors.append("weekStartDay must be 0 (Sunday) or 1 (Monday)")
    if "theme" in updates and updates["theme"] not in THEMES:
        errors.append(f"Invalid theme: {updates['theme']}")
    if "defaultNotificationTime" in updates:
        t = updates["defaultNotificationTime"]
        if not (isinstance(t, str) and _TIME_RE.match(t)):
            errors.append("defaultNotificationTime must be HH:MM")
    return errors


def update_settings(
    updates: dict[str, Any], root: Path | None = None
) -> tuple[Settings | None, list[str]]:
    """Merge a partial camelCase update and persist. Returns (settings, errors)."""
    errors = validate_settings_update(updates)
    if errors:
        return None, errors
    current = load_settings(root)
    updated = Settings.from_dict({**current.to_dict(), **updates})
    save_settings(updated, root)
    return updated, []


def reset_settings(root: Path | None = None) -> Settings:
    """Drop the stored blob; the next load yields defaults."""
    if remove_file(settings_path(root)):
        logger.info("Settings reset to defaults")
    return Settings()
