"""
The five detectors.

Each scanner is a pure function of (content, compiled rules) returning a
:class:`Verdict`. A disabled or absent category always returns Allow.
Within a scanner, deny outcomes are checked before ask, and ask before
allow; the first hit wins.

The tool permission scanner differs in one respect: it returns ``None``
when no tool pattern matched at all, so the inspector can tell "explicitly
allowed, skip content scanning" apart from "no opinion, keep scanning".
"""

from __future__ import annotations

from railguard.core.policy.document import (
    CommandRules,
    NetworkRules,
    PathRules,
    PolicyDocument,
    SecretRules,
    ToolRules,
)
from railguard.core.policy.matchers import (
    GlobMatcher,
    domain_matches,
    extract_hostnames,
    find_high_entropy_token,
    iter_high_entropy_tokens,
    redact,
)
from railguard.core.policy.verdict import DenyKind, Verdict

HIGH_ENTROPY_NAME = "high-entropy-string"
INTEGRATION_PREFIX = "mcp__"

# ---------------------------------------------------------------------------
# Secrets
# ---------------------------------------------------------------------------


def scan_secrets(text: str, rules: SecretRules) -> Verdict:
    """Named patterns first, in declaration order, then the entropy heuristic."""
    if not rules.enabled or not text:
        return Verdict.allow()
    for name, matcher in rules.patterns:
        found = matcher.search(text)
        if found is not None:
            return Verdict.deny(
                DenyKind.SECRET_DETECTED, f"Secret detected ({name}): {redact(found)}"
            )
    if rules.entropy is not None:
        e = rules.entropy
        token = find_high_entropy_token(text, e.threshold, e.min_length, e.window)
        if token is not None:
            return Verdict.deny(
                DenyKind.SECRET_DETECTED,
                f"Secret detected ({HIGH_ENTROPY_NAME}): {redact(token)}",
            )
    return Verdict.allow()


def redact_secrets(text: str, rules: SecretRules) -> str:
    """Replace everything the secret scanner would flag with a redacted preview."""
    for _name, matcher in rules.patterns:
        text = matcher.sub(lambda m: redact(m.group(0)), text)
    if rules.entropy is not None:
        e = rules.entropy
        for token in set(iter_high_entropy_tokens(text, e.threshold, e.min_length, e.window)):
            text = text.replace(token, redact(token))
    return text


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def scan_command(command: str, rules: CommandRules) -> Verdict:
    """
    Allow entries are checked first and must match the *whole* command; a hit
    exempts it from block and ask. Then block (deny), then ask.
    """
    if not rules.enabled or not command.strip():
        return Verdict.allow()
    stripped = command.strip()
    for matcher in rules.allow:
        if matcher.fullmatch(stripped):
            return Verdict.allow()
    for matcher in rules.block:
        if matcher.search(command) is not None:
            return Verdict.deny(
                DenyKind.DANGEROUS_COMMAND, f"Dangerous command blocked: {matcher.source}"
            )
    for matcher in rules.ask:
        if matcher.search(command) is not None:
            return Verdict.ask(f"Command requires confirmation: {matcher.source}")
    return Verdict.allow()


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def normalize_path(path: str) -> str:
    """
    >>> normalize_path("./project//.env")
    'project/.env'
    """
    p = path.replace("\\", "/")
    while p.startswith("./"):
        p = p[2:]
    while "//" in p:
        p = p.replace("//", "/")
    return p


def _basename(path: str) -> str:
    return path.rstrip("/").rsplit("/", 1)[-1]


def scan_path(path: str, rules: PathRules) -> Verdict:
    if not rules.enabled or not path:
        return Verdict.allow()
    normalized = normalize_path(path)
    name = _basename(normalized)
    for glob in rules.blocked:
        if glob.matches(normalized) or (name and glob.matches(name)):
            return Verdict.deny(
                DenyKind.PROTECTED_PATH, f"Access to protected path: {normalized}"
            )
    return Verdict.allow()


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------


def scan_network(text: str, rules: NetworkRules) -> Verdict:
    if not rules.enabled or not text or not rules.blocked_domains:
        return Verdict.allow()
    for host in extract_hostnames(text):
        for blocked in rules.blocked_domains:
            if domain_matches(host, blocked):
                return Verdict.deny(DenyKind.NETWORK_EXFILTRATION, f"Blocked domain: {host}")
    return Verdict.allow()


# ---------------------------------------------------------------------------
# Tool permissions
# ---------------------------------------------------------------------------


def split_integration_tool(tool_name: str) -> tuple[str, str] | None:
    """
    Split ``mcp__<server>__<tool>`` into ``(server, tool)``.

    >>> split_integration_tool("mcp__github__delete_repo")
    ('github', 'delete_repo')
    >>> split_integration_tool("Bash") is None
    True
    """
    if not tool_name.startswith(INTEGRATION_PREFIX):
        return None
    server, _, tool = tool_name[len(INTEGRATION_PREFIX) :].partition("__")
    if not server:
        return None
    return server, tool


def _any_match(globs: tuple[GlobMatcher, ...], names: tuple[str, ...]) -> bool:
    return any(g.matches(n) for g in globs for n in names)


def _check_tool_rules(rules: ToolRules, names: tuple[str, ...], tool_name: str) -> Verdict | None:
    if _any_match(rules.deny, names):
        return Verdict.deny(DenyKind.TOOL_DENIED, f"Tool '{tool_name}' is blocked by policy")
    if _any_match(rules.ask, names):
        return Verdict.ask(f"Tool '{tool_name}' requires confirmation")
    if _any_match(rules.allow, names):
        return Verdict.allow()
    return None


def scan_tool_permission(tool_name: str, document: PolicyDocument) -> Verdict | None:
    """
    Return the tool-level verdict, or None when no tool pattern matched.

    For integration tools a server-specific override (``mcp_servers``) is
    consulted first, matching both the server-local tool name and the full
    name; a hit there is final. Otherwise the global ``tools`` block applies.
    """
    qualified = split_integration_tool(tool_name)
    if qualified is not None:
        server, local = qualified
        override = document.mcp_servers.get(server)
        if override is not None:
            names = (local, tool_name) if local else (tool_name,)
            verdict = _check_tool_rules(override, names, tool_name)
            if verdict is not None:
                return verdict
    return _check_tool_rules(document.tools, (tool_name,), tool_name)
