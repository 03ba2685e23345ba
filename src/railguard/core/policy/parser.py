"""
Policy YAML parser — loads, validates, and compiles Railguard policy files.

Usage::

    document = load_policy("railguard.yaml")
    document = parse_policy(yaml_string)
    document = default_policy()          # built-in safe default
    document = resolve_policy()          # explicit > project > user > default

Resolution is single-source: the first policy file found is the whole
policy. Files are never merged, so what ``railguard lint`` validates is
exactly what the hook enforces.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from railguard.core.constants import POLICY_FILENAME, USER_CONFIG_DIR
from railguard.core.exceptions import ConfigNotFoundError, PolicyIssue, PolicyParseError
from railguard.core.policy.defaults import default_policy_data
from railguard.core.policy.document import PolicyDocument, build_document
from railguard.core.policy.model import PolicyConfig

logger = logging.getLogger(__name__)


def load_policy(path: str | Path) -> PolicyDocument:
    """
    Load, validate, and compile a policy from a YAML file.

    Raises:
        ConfigNotFoundError: if the file does not exist.
        PolicyParseError: if the file is unreadable or invalid.
    """
    p = Path(path).expanduser()
    if not p.exists():
        raise ConfigNotFoundError(f"Policy file not found: {p}")
    try:
        content = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise PolicyParseError(
            f"Cannot read policy file {p}: {exc}",
            [PolicyIssue("(file)", "file_read_error", str(exc))],
        ) from exc
    return parse_policy(content, source=str(p))


def parse_config(yaml_text: str, source: str = "<string>") -> PolicyConfig:
    """
    Parse and schema-validate a YAML policy string (no pattern compilation).

    Raises:
        PolicyParseError: on YAML syntax errors or schema violations.
    """
    try:
        data = yaml.safe_load(yaml_text)
    except yaml.YAMLError as exc:
        raise PolicyParseError(
            f"YAML syntax error in {source}: {exc}",
            [PolicyIssue("(root)", "yaml_parse_error", str(exc))],
        ) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"Policy {source} must be a YAML mapping (got {type(data).__name__})"
        raise PolicyParseError(msg, [PolicyIssue("(root)", "schema_error", msg)])
    return config_from_data(data, source)


def config_from_data(data: dict[str, Any], source: str = "<data>") -> PolicyConfig:
    """Validate already-decoded document data with Pydantic."""
    try:
        return PolicyConfig.model_validate(data)
    except ValidationError as exc:
        # Format Pydantic errors into human-readable messages
        issues: list[PolicyIssue] = []
        for err in exc.errors():
            loc = " → ".join(str(x) for x in err["loc"]) if err["loc"] else "(root)"
            issues.append(PolicyIssue(loc, "schema_error", err["msg"]))
        lines = [f"Policy validation failed in {source}:"]
        lines.extend(f"  {issue}" for issue in issues)
        raise PolicyParseError("\n".join(lines), issues) from exc


def parse_policy(yaml_text: str, source: str = "<string>") -> PolicyDocument:
    """Parse, validate, and compile a YAML policy string."""
    return build_document(parse_config(yaml_text, source), source=source)


def default_policy() -> PolicyDocument:
    """
    Return the built-in safe-default policy.

    Used when neither a project nor a user policy file exists.
    """
    return build_document(config_from_data(default_policy_data(), "<default>"), "<default>")


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def project_policy_path(cwd: Path | None = None) -> Path:
    return (cwd or Path.cwd()) / POLICY_FILENAME


def user_policy_path(home: Path | None = None) -> Path:
    return (home or Path.home()) / USER_CONFIG_DIR / POLICY_FILENAME


def find_policy_file(
    explicit: str | Path | None = None,
    cwd: Path | None = None,
    home: Path | None = None,
) -> Path | None:
    """
    Return the single policy file that should be used, or None for the default.

    Priority (first existing wins):
      1. ``explicit`` (``--config`` / ``RAILGUARD_CONFIG``) — must exist
      2. ``./railguard.yaml``
      3. ``~/.config/railguard/railguard.yaml``

    Raises:
        ConfigNotFoundError: if ``explicit`` is given but does not exist.
    """
    if explicit:
        p = Path(explicit).expanduser()
        if not p.exists():
            raise ConfigNotFoundError(f"Policy file not found: {p}")
        return p
    for candidate in (project_policy_path(cwd), user_policy_path(home)):
        if candidate.is_file():
            return candidate
    return None


def resolve_policy(
    explicit: str | Path | None = None,
    cwd: Path | None = None,
    home: Path | None = None,
) -> PolicyDocument:
    """Load the policy selected by :func:`find_policy_file`, or the default."""
    path = find_policy_file(explicit, cwd=cwd, home=home)
    if path is None:
        logger.debug("No policy file found — using built-in default")
        return default_policy()
    logger.debug("Using policy file %s", path)
    return load_policy(path)
