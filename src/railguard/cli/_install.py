"""railguard install / uninstall — manage the hook entry in the host agent's settings."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from railguard.core.constants import ExitCode
from railguard.core.exceptions import InstallError
from railguard.core.install import (
    default_hook_command,
    default_settings_path,
    install_hook,
    uninstall_hook,
)


def cmd_install(settings_path: Path | None, command: str | None, console: Console) -> None:
    path = settings_path or default_settings_path()
    hook_command = command or default_hook_command()
    try:
        added = install_hook(path, hook_command)
    except InstallError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(ExitCode.ERROR)

    if not added:
        console.print("[yellow][-][/yellow] Railguard hook is already installed")
        return
    console.print("[green][OK][/green] Installed Railguard hook (PreToolUse, all tools)")
    console.print(f"  Settings: {escape(str(path))}")
    console.print(f"  Command:  {escape(hook_command)}")
    console.print("  Policy:   ./railguard.yaml, then ~/.config/railguard/railguard.yaml")


def cmd_uninstall(settings_path: Path | None, console: Console) -> None:
    path = settings_path or default_settings_path()
    try:
        removed = uninstall_hook(path)
    except InstallError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(ExitCode.ERROR)

    if removed:
        console.print("[green][OK][/green] Removed Railguard hook")
    else:
        console.print("[yellow][-][/yellow] Railguard hook was not installed")
