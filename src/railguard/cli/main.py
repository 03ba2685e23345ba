"""
Railguard CLI entry point.

Commands:
  railguard hook                 — evaluate one PreToolUse request from stdin
  railguard lint [--json]        — validate the active policy file
  railguard test TOOL JSON       — evaluate a synthetic request and show the verdict
  railguard install              — register the hook in ~/.claude/settings.json
  railguard uninstall            — remove the hook from ~/.claude/settings.json
  railguard version              — show version information

Global options ``--config`` and ``--log-level`` override ``RAILGUARD_CONFIG``
and ``RAILGUARD_LOG_LEVEL``.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console

from railguard import __version__
from railguard.core.config import RailguardSettings
from railguard.core.constants import ExitCode
from railguard.core.exceptions import ConfigError

console = Console()


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", "-V", message="railguard %(version)s")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Policy file to use instead of ./railguard.yaml or ~/.config/railguard/railguard.yaml.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Diagnostic log level (logs go to stderr).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, log_level: str | None) -> None:
    """Railguard — inline policy gate for AI coding-agent tool calls."""
    from railguard.core.config import configure_logging, load_settings

    try:
        settings = load_settings(config_path=config_path, log_level=log_level)
    except ConfigError as exc:
        if ctx.invoked_subcommand == "hook":
            from railguard.cli._hook import reject

            reject(exc)
        click.echo(f"Error: {exc}", err=True)
        sys.exit(ExitCode.ERROR)

    configure_logging(settings.log_level)
    ctx.obj = settings


# ---------------------------------------------------------------------------
# hook
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_obj
def hook(settings: RailguardSettings) -> None:
    """Evaluate one tool call read from stdin (PreToolUse hook protocol)."""
    from railguard.cli._hook import cmd_hook

    cmd_hook(settings)


# ---------------------------------------------------------------------------
# lint / test
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False, help="Machine-readable output.")
@click.pass_obj
def lint(settings: RailguardSettings, as_json: bool) -> None:
    """
    Validate the active policy file.

    Exits 0 if there are no errors (warnings allowed), 1 otherwise.
    """
    from railguard.cli._policy_cmd import cmd_lint

    cmd_lint(settings, as_json=as_json)


@cli.command("test")
@click.argument("tool")
@click.argument("tool_input", default="{}")
@click.option(
    "--explain",
    is_flag=True,
    default=False,
    help="Show every check and its outcome (verbose).",
)
@click.pass_obj
def test_cmd(settings: RailguardSettings, tool: str, tool_input: str, explain: bool) -> None:
    """
    Evaluate a synthetic tool call against the active policy.

    Example::

        railguard test Bash '{"command": "rm -rf /"}' --explain

    Exits 0 for allow or ask, 2 for deny, 1 on errors.
    """
    from railguard.cli._policy_cmd import cmd_test

    cmd_test(settings, tool=tool, tool_input=tool_input, explain=explain)


# ---------------------------------------------------------------------------
# install / uninstall
# ---------------------------------------------------------------------------


_settings_option = click.option(
    "--settings",
    "settings_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Host agent settings file (default: ~/.claude/settings.json).",
)


@cli.command()
@_settings_option
@click.option("--command", "hook_command", default=None, help="Override the hook command.")
def install(settings_path: Path | None, hook_command: str | None) -> None:
    """Register Railguard as a PreToolUse hook for every tool."""
    from railguard.cli._install import cmd_install

    cmd_install(settings_path=settings_path, command=hook_command, console=console)


@cli.command()
@_settings_option
def uninstall(settings_path: Path | None) -> None:
    """Remove the Railguard hook."""
    from railguard.cli._install import cmd_uninstall

    cmd_uninstall(settings_path=settings_path, console=console)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False)
def version(as_json: bool) -> None:
    """Show version information."""
    import platform

    if as_json:
        import json

        click.echo(
            json.dumps(
                {
                    "railguard": __version__,
                    "python": sys.version.split()[0],
                    "platform": sys.platform,
                    "arch": platform.machine(),
                },
                indent=2,
            )
        )
    else:
        console.print(f"railguard {__version__}")
        console.print(f"Python {sys.version.split()[0]}")
        console.print(f"Platform: {sys.platform} {platform.machine()}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
