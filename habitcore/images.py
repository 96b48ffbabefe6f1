"""Photo attachments for notes, copied into the workspace's note_images/."""

from __future__ import annotations

import logging
import secrets
import shutil
from datetime import datetime
from pathlib import Path

from habitcore.workspace import images_dir

logger = logging.getLogger(__name__)


def save_image(source: Path, root: Path | None = None, now: datetime | None = None) -> Path:
    """Copy *source* into note_images/ under a unique name and return the new path."""
    if now is None:
        now = datetime.now()
    target_dir = images_dir(root)
    target_dir.mkdir(parents=True, exist_ok=True)
    suffix = source.suffix.lower() or ".jpg"
    filename = f"img_{int(now.timestamp() * 1000)}_{secrets.token_hex(3)}{suffix}"
    dest = target_dir / filename
    try:
        shutil.copyfile(source, dest)
    except OSError as e:
        logger.error("Error saving image %s: %s", source, e)
        raise
    return dest


def image_path(path_or_filename: str, root: Path | None = None) -> Path:
    """Resolve a stored reference: full paths pass through, bare names live in note_images/."""
    if path_or_filename.startswith("file://"):
        return Path(path_or_filename[len("file://"):])
    candidate = Path(path_or_filename)
    if candidate.is_absolute():
        return candidate
    return images_dir(root) / path_or_filename


def delete_image(path: str | Path, root: Path | None = None) -> bool:
    """Delete an image inside note_images/. Failures are logged, never raised."""
    target = image_path(str(path), root).resolve()
    base = images_dir(root).resolve()
    if base not in target.parents:
        logger.warning("Refusing to delete image outside %s: %s", base, target)
        return False
    try:
        if target.exists():
            target.unlink()
            return True
    except OSError as e:
        logger.error("Error deleting image %s: %s", target, e)
    return False
