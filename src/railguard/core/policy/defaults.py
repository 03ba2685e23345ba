"""
Built-in safe-default policy, used when no policy file is found.

Kept as plain data so ``railguard lint`` and the tests validate it through
exactly the same path as a user's ``railguard.yaml``.
"""

from __future__ import annotations

from typing import Any

DEFAULT_SECRET_PATTERNS: dict[str, str] = {
    "aws_access_key": r"\b(?:A3T[A-Z0-9]|AKIA|ASIA|ABIA|ACCA)[A-Z0-9]{16}\b",
    "aws_secret_key": (
        r"(?i)\baws_?secret_?access_?key\b[\"']?\s*[:=]\s*[\"']?"
        r"[A-Za-z0-9/+=]{40}(?![A-Za-z0-9/+=])"
    ),
    "github_token": (
        r"\b(?:gh[pousr]_[A-Za-z0-9]{36}|github_pat_[A-Za-z0-9]{22}_[A-Za-z0-9]{59})\b"
    ),
    "anthropic_key": r"\bsk-ant-[A-Za-z0-9_\-]{20,}",
    "openai_key": r"\bsk-(?:proj-)?[A-Za-z0-9]{20,}",
    "slack_token": r"\bxox[abposr]-[A-Za-z0-9\-]{10,}",
    "private_key": r"-----BEGIN (?:[A-Z]+ )?PRIVATE KEY-----",
}

DEFAULT_BLOCK_COMMANDS: list[str] = [
    r"\brm\s+-[a-zA-Z]*(?:rf|fr)[a-zA-Z]*\s+(?:--\s+)?[/~]",
    r">\s*/dev/sd[a-z]",
    r"\bmkfs\.",
    r"\bdd\s+if=\S+\s+of=/dev/",
    r"\bchmod\s+-R\s+777\s+/",
    r":\(\)\s*\{\s*:\|:&\s*\}\s*;",  # fork bomb
]

DEFAULT_ASK_COMMANDS: list[str] = [
    r"\bgit\s+push\s+(?:.*\s)?(?:--force|-f)\b",
    r"\bgit\s+reset\s+--hard\b",
]

DEFAULT_BLOCKED_PATHS: list[str] = [
    "**/.env",
    "**/.env.*",
    "**/*.pem",
    "**/*.key",
    "**/id_rsa",
    "**/id_ed25519",
    "**/.ssh/**",
    "**/.aws/credentials",
    "**/.git/config",
]

DEFAULT_BLOCKED_DOMAINS: list[str] = [
    "pastebin.com",
    "hastebin.com",
    "paste.ee",
    "ghostbin.com",
    "ngrok.io",
    "ngrok.app",
    "requestbin.com",
    "hookbin.com",
    "webhook.site",
]


def default_policy_data() -> dict[str, Any]:
    """Return a fresh copy of the default policy as raw document data."""
    return {
        "name": "safe-default",
        "mode": "strict",
        "secrets": {"enabled": True, "patterns": dict(DEFAULT_SECRET_PATTERNS)},
        "commands": {
            "enabled": True,
            "block": list(DEFAULT_BLOCK_COMMANDS),
            "allow": [],
            "ask": list(DEFAULT_ASK_COMMANDS),
        },
        "paths": {"enabled": True, "blocked": list(DEFAULT_BLOCKED_PATHS)},
        "network": {"enabled": True, "blocked_domains": list(DEFAULT_BLOCKED_DOMAINS)},
        "tools": {"allow": [], "deny": [], "ask": []},
        "mcp_servers": {},
    }
