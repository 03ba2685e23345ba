"""Railguard constants: filesystem layout, limits, and exit codes."""

from __future__ import annotations

from enum import IntEnum

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    BLOCKED = 2  # host agent treats 2 as "deny, show stderr to the model"


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

POLICY_FILENAME = "railguard.yaml"
USER_CONFIG_DIR = ".config/railguard"  # relative to $HOME
CLAUDE_SETTINGS_PATH = ".claude/settings.json"  # relative to $HOME
HOOK_EXECUTABLE = "railguard"  # "<path>/railguard hook" or "<python> -m railguard hook"

# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------

ENV_CONFIG = "RAILGUARD_CONFIG"
ENV_AUDIT_LOG = "RAILGUARD_AUDIT_LOG"
ENV_LOG_LEVEL = "RAILGUARD_LOG_LEVEL"

# ---------------------------------------------------------------------------
# Matching limits
# ---------------------------------------------------------------------------

REGEX_TIMEOUT_SECONDS = 0.05  # per match call
MAX_PATTERN_LENGTH = 1024
MAX_URL_AUTHORITY = 512
MAX_INPUT_DEPTH = 16  # nesting bound when walking unknown tool inputs

DEFAULT_ENTROPY_THRESHOLD = 4.5  # bits per character
DEFAULT_ENTROPY_MIN_LENGTH = 20
DEFAULT_ENTROPY_WINDOW = 64

HOOK_EVENT_NAME = "PreToolUse"
