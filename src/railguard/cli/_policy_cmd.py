"""
CLI commands: ``railguard lint`` and ``railguard test --explain``.
"""

from __future__ import annotations

import json
import sys
import time

import click

from railguard.core.config import RailguardSettings
from railguard.core.constants import ExitCode
from railguard.core.exceptions import RailguardError
from railguard.core.policy.defaults import default_policy_data
from railguard.core.policy.explain import explain_request, explain_verdict
from railguard.core.policy.inspector import inspect
from railguard.core.policy.lint import (
    LintReport,
    format_human,
    format_json,
    lint_config,
    lint_policy_file,
)
from railguard.core.policy.parser import config_from_data, find_policy_file, resolve_policy
from railguard.core.policy.verdict import ToolInvocationRequest


def cmd_lint(settings: RailguardSettings, as_json: bool) -> None:
    try:
        path = find_policy_file(settings.config_path)
    except RailguardError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(ExitCode.ERROR)

    if path is None:
        report = LintReport(source="<default>")
        lint_config(config_from_data(default_policy_data(), "<default>"), report)
        if not as_json:
            click.echo("No policy file found; the built-in default policy is in effect.")
    else:
        report = lint_policy_file(path)

    click.echo(format_json(report) if as_json else format_human(report))
    if report.has_errors:
        sys.exit(ExitCode.ERROR)


def cmd_test(settings: RailguardSettings, tool: str, tool_input: str, explain: bool) -> None:
    try:
        data = json.loads(tool_input)
    except json.JSONDecodeError as exc:
        click.echo(f"Error: tool input is not valid JSON: {exc}", err=True)
        sys.exit(ExitCode.ERROR)

    try:
        request = ToolInvocationRequest.from_payload({"tool_name": tool, "tool_input": data})
        document = resolve_policy(settings.config_path)
        if explain:
            click.echo(explain_request(request, document))
            click.echo("")
        start = time.perf_counter()
        inspection = inspect(request, document)
        elapsed_ms = (time.perf_counter() - start) * 1000
    except RailguardError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(ExitCode.ERROR)

    click.echo(f"Tool:    {request.tool_name}")
    click.echo(f"Policy:  {document.name} ({document.source})")
    click.echo(f"Latency: {elapsed_ms:.3f}ms")
    click.echo(explain_verdict(inspection))
    if inspection.verdict.is_deny:
        sys.exit(ExitCode.BLOCKED)
