"""Lifecycle hooks for habitline.

Hooks run shell commands when habits and notes change. Configured via
hooks.yaml in the workspace root, e.g.::

    on_habit_complete:
      - notify-send "Habit done"
      - command: ./sync.sh
        timeout: 10

Hook points:
- on_habit_create, on_habit_update, on_habit_delete
- on_habit_complete
- on_note_save
- post_export
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from habitcore.fileio import read_yaml
from habitcore.workspace import hooks_config_path, workspace_root

logger = logging.getLogger(__name__)

VALID_HOOK_POINTS = {
    "on_habit_create",
    "on_habit_update",
    "on_habit_delete",
    "on_habit_complete",
    "on_note_save",
    "post_export",
}

DEFAULT_TIMEOUT = 30
OUTPUT_CAP = 4096


def load_hooks_config(root: Path | None = None) -> dict[str, Any]:
    if root is None:
        root = workspace_root()
    return read_yaml(hooks_config_path(root))


def run_hooks(
    hook_point: str,
    context: dict[str, Any],
    root: Path | None = None,
) -> list[dict[str, Any]]:
    """Run every command registered for *hook_point*.

    The context is passed as JSON on stdin. Failures are recorded in the
    returned results and logged; they never propagate.
    """
    if hook_point not in VALID_HOOK_POINTS:
        return []
    if root is None:
        root = workspace_root()

    hooks = load_hooks_config(root).get(hook_point, [])
    if not hooks or not isinstance(hooks, list):
        return []

    results = []
    context_json = json.dumps(context, ensure_ascii=False)

    for hook in hooks:
        if isinstance(hook, str):
            command, timeout = hook, DEFAULT_TIMEOUT
        elif isinstance(hook, dict):
            command = hook.get("command", "")
            timeout = hook.get("timeout", DEFAULT_TIMEOUT)
        else:
            continue
        if not command:
            continue

        result: dict[str, Any] = {"command": command, "hook_point": hook_point}
        try:
            proc = subprocess.run(
                command,
                shell=True,
                input=context_json,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=str(root),
            )
            result["exit_code"] = proc.returncode
            result["stdout"] = proc.stdout[:OUTPUT_CAP]
            result["stderr"] = proc.stderr[:OUTPUT_CAP]
            if proc.returncode != 0:
                logger.warning("Hook %r (%s) exited %d", command, hook_point, proc.returncode)
        except subprocess.TimeoutExpired:
            result["exit_code"] = -1
            result["error"] = f"Hook timed out after {timeout}s"
            logger.warning("Hook %r (%s) timed out after %ss", command, hook_point, timeout)
        except OSError as e:
            result["exit_code"] = -1
            result["error"] = str(e)
            logger.error("Hook %r (%s) failed: %s", command, hook_point, e)

        results.append(result)

    return results
