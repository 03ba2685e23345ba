"""
Policy linter — ``railguard lint``.

Runs the same parse → validate → compile path as the hook, but collects
problems instead of stopping at the first one, and adds warnings for
configurations that are valid yet probably not what the author meant.

Error codes: ``file_read_error``, ``yaml_parse_error``, ``schema_error``,
``invalid_regex``, ``invalid_glob``.
Warning codes: ``missing_policy``, ``monitor_mode``, ``allow_all_tools``,
``section_disabled``, ``empty_section``.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from enum import StrEnum
from pathlib import Path

from railguard.core.exceptions import PolicyParseError
from railguard.core.policy.document import build_document
from railguard.core.policy.model import PolicyConfig, PolicyMode, ToolsSection
from railguard.core.policy.parser import parse_config

_MATCH_ALL = frozenset({"*", "**"})


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class LintIssue:
    severity: Severity
    code: str
    message: str
    location: str | None = None


@dataclass
class LintReport:
    source: str
    issues: list[LintIssue] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == Severity.WARNING)

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    def error(self, code: str, message: str, location: str | None = None) -> None:
        self.issues.append(LintIssue(Severity.ERROR, code, message, location))

    def warning(self, code: str, message: str, location: str | None = None) -> None:
        self.issues.append(LintIssue(Severity.WARNING, code, message, location))


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def _check_tools(report: LintReport, section: ToolsSection | None, location: str) -> None:
    if section is not None and _MATCH_ALL.intersection(section.allow):
        report.warning(
            "allow_all_tools",
            "A match-all allow entry skips content scanning for every tool",
            f"{location} → allow",
        )


def _check_sections(report: LintReport, config: PolicyConfig) -> None:
    sections = {
        "secrets": config.secrets,
        "commands": config.commands,
        "paths": config.paths,
        "network": config.network,
    }
    no_scanners = all(s is None for s in sections.values())
    if no_scanners and config.tools is None and not config.mcp_servers:
        report.warning("missing_policy", "No policy sections found; every check is disabled")
        return

    for name, section in sections.items():
        if section is not None and not section.enabled:
            report.warning("section_disabled", f"{name} scanning is disabled", name)

    empty: list[str] = []
    if config.secrets and config.secrets.enabled:
        if not config.secrets.patterns and not config.secrets.entropy.enabled:
            empty.append("secrets")
    if config.commands and config.commands.enabled:
        if not config.commands.block and not config.commands.ask:
            empty.append("commands")
    if config.paths and config.paths.enabled and not config.paths.blocked:
        empty.append("paths")
    if config.network and config.network.enabled and not config.network.blocked_domains:
        empty.append("network")
    for name in empty:
        report.warning("empty_section", f"{name} is enabled but has no patterns", name)


def lint_config(config: PolicyConfig, report: LintReport) -> None:
    """Compile ``config`` and add every error and warning to ``report``."""
    try:
        build_document(config, source=report.source)
    except PolicyParseError as exc:
        for issue in exc.issues:
            report.error(issue.code, issue.message, issue.location)

    if config.mode == PolicyMode.MONITOR:
        report.warning(
            "monitor_mode",
            "Policy is in monitor mode: violations are logged, never blocked",
            "mode",
        )
    _check_sections(report, config)
    _check_tools(report, config.tools, "tools")
    for server, section in config.mcp_servers.items():
        _check_tools(report, section, f"mcp_servers → {server}")


def lint_policy_text(yaml_text: str, source: str = "<string>") -> LintReport:
    report = LintReport(source=source)
    try:
        config = parse_config(yaml_text, source)
    except PolicyParseError as exc:
        for issue in exc.issues:
            report.error(issue.code, issue.message, issue.location)
        return report
    lint_config(config, report)
    return report


def lint_policy_file(path: str | Path) -> LintReport:
    p = Path(path).expanduser()
    try:
        content = p.read_text(encoding="utf-8")
    except OSError as exc:
        report = LintReport(source=str(p))
        report.error("file_read_error", f"Failed to read policy file: {exc}")
        return report
    return lint_policy_text(content, source=str(p))


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def format_human(report: LintReport) -> str:
    if not report.issues:
        return f"{report.source}: policy is valid"
    lines: list[str] = []
    for issue in report.issues:
        line = f"[{issue.severity}] {issue.code}: {issue.message}"
        if issue.location:
            line += f" [{issue.location}]"
        lines.append(line)
    lines.append("")
    lines.append(f"{report.error_count} error(s), {report.warning_count} warning(s)")
    return "\n".join(lines)


def format_json(report: LintReport) -> str:
    data = {
        "source": report.source,
        "issues": [
            {k: v for k, v in asdict(issue).items() if v is not None} for issue in report.issues
        ],
        "error_count": report.error_count,
        "warning_count": report.warning_count,
    }
    return json.dumps(data, indent=2)
