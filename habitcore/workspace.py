"""Workspace root, timezone and path helpers for habitline."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from habitcore.fileio import read_yaml

logger = logging.getLogger(__name__)


def workspace_root() -> Path:
    """Get the workspace root directory holding all habit data."""
    return Path(
        os.environ.get("HABITS_ROOT", str(Path.home() / "habits"))
    ).expanduser().resolve()


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get the timezone named in config.yaml, defaulting to UTC."""
    if root is None:
        root = workspace_root()
    try:
        config = read_yaml(config_path(root))
        if config and config.get("timezone"):
            return ZoneInfo(str(config["timezone"]))
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        logger.warning("Ignoring invalid timezone in config.yaml: %s", e)
    return ZoneInfo("UTC")


def today_str(root: Path | None = None) -> str:
    """Today's local calendar date as YYYY-MM-DD."""
    return now_local(root).date().isoformat()


def now_local(root: Path | None = None) -> datetime:
    """Current aware datetime in the workspace timezone."""
    return datetime.now(get_user_timezone(root))


# ── Path helpers ──────────────────────────────────────────────

def habits_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "habits.json"


def notes_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "notes.json"


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "settings.json"


def reminders_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "reminders.json"


def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "hooks.yaml"


def images_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "note_images"


def exports_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "exports"
