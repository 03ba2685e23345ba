"""
Register the Railguard hook with the host agent.

The host agent reads ``~/.claude/settings.json``; Railguard adds one
``PreToolUse`` entry with no matcher, so every tool call passes through::

    {"hooks": {"PreToolUse": [{"hooks": [{"type": "command", "command": "railguard hook"}]}]}}

Both operations are idempotent and leave every other setting untouched. The
file is rewritten atomically (temp file + rename) so a crash never leaves a
half-written settings file behind.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Any

from railguard.core.constants import CLAUDE_SETTINGS_PATH, HOOK_EVENT_NAME, HOOK_EXECUTABLE
from railguard.core.exceptions import InstallError

logger = logging.getLogger(__name__)


def default_settings_path() -> Path:
    return Path.home() / CLAUDE_SETTINGS_PATH


def default_hook_command() -> str:
    """The command the host agent should run: the installed script, else this interpreter."""
    exe = shutil.which("railguard")
    if exe:
        return f"{Path(exe).as_posix()} hook"
    return f"{Path(sys.executable).as_posix()} -m railguard hook"


def _read_settings(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8") or "{}")
    except (OSError, json.JSONDecodeError) as exc:
        raise InstallError(f"Cannot read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise InstallError(f"{path} must contain a JSON object")
    return data


def _write_settings(path: Path, data: dict[str, Any]) -> None:
    tmp = path.with_name(path.name + ".railguard.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp, path)
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise InstallError(f"Cannot write {path}: {exc}") from exc


def _is_our_hook(hook: Any) -> bool:
    """True for exactly the hook shape :func:`install_hook` writes."""
    if not isinstance(hook, dict) or hook.get("type") != "command":
        return False
    command = hook.get("command")
    if not isinstance(command, str):
        return False
    command = command.strip()
    if command.endswith(f" -m {HOOK_EXECUTABLE} hook"):
        return True
    if not command.endswith(" hook"):
        return False
    exe = Path(command.removesuffix(" hook").strip())
    return exe.name in (HOOK_EXECUTABLE, f"{HOOK_EXECUTABLE}.exe")


def _entry_hooks(entry: Any) -> list[Any]:
    if not isinstance(entry, dict) or not isinstance(entry.get("hooks"), list):
        return []
    return entry["hooks"]


def _pre_tool_use(settings: dict[str, Any], path: Path) -> list[Any]:
    hooks = settings.setdefault("hooks", {})
    if not isinstance(hooks, dict):
        raise InstallError(f"'hooks' in {path} is not an object")
    entries = hooks.setdefault(HOOK_EVENT_NAME, [])
    if not isinstance(entries, list):
        raise InstallError(f"'hooks.{HOOK_EVENT_NAME}' in {path} is not a list")
    return entries


def install_hook(settings_path: Path | None = None, command: str | None = None) -> bool:
    """
    Add the Railguard hook. Returns False if it was already installed.

    Raises:
        InstallError: if the settings file is unreadable, malformed or unwritable.
    """
    path = settings_path or default_settings_path()
    settings = _read_settings(path)
    entries = _pre_tool_use(settings, path)
    if any(_is_our_hook(h) for e in entries for h in _entry_hooks(e)):
        logger.info("Railguard hook already present in %s", path)
        return False
    entries.append({"hooks": [{"type": "command", "command": command or default_hook_command()}]})
    _write_settings(path, settings)
    logger.info("Installed Railguard hook in %s", path)
    return True


def uninstall_hook(settings_path: Path | None = None) -> bool:
    """
    Remove every Railguard hook. Returns False if there was none.

    Other hooks sharing an entry with ours are kept; an entry left with no
    hooks is dropped, and so is an empty ``PreToolUse`` list.

    Raises:
        InstallError: if the settings file is unreadable, malformed or unwritable.
    """
    path = settings_path or default_settings_path()
    if not path.exists():
        return False
    settings = _read_settings(path)
    hooks = settings.get("hooks")
    if not isinstance(hooks, dict) or not isinstance(hooks.get(HOOK_EVENT_NAME), list):
        return False

    removed = False
    kept: list[Any] = []
    for entry in hooks[HOOK_EVENT_NAME]:
        entry_hooks = _entry_hooks(entry)
        remaining = [h for h in entry_hooks if not _is_our_hook(h)]
        if len(remaining) == len(entry_hooks):
            kept.append(entry)
            continue
        removed = True
        if remaining:
            kept.append({**entry, "hooks": remaining})
    if not removed:
        return False

    if kept:
        hooks[HOOK_EVENT_NAME] = kept
    else:
        del hooks[HOOK_EVENT_NAME]
    _write_settings(path, settings)
    logger.info("Removed Railguard hook from %s", path)
    return True
