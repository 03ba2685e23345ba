"""
Compiled policy document — the immutable object every scanner reads.

Built once from a validated :class:`PolicyConfig` by :func:`build_document`.
All regex and glob sources are compiled here and nowhere else; a pattern
that fails to compile is a :class:`PolicyParseError` listing every bad
pattern with its location, not just the first.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TypeVar

from railguard.core.exceptions import PatternError, PolicyIssue, PolicyParseError
from railguard.core.policy.matchers import GlobMatcher, RegexMatcher, normalize_domain
from railguard.core.policy.model import PolicyConfig, PolicyMode, ToolsSection

T = TypeVar("T")


@dataclass(frozen=True)
class EntropyRule:
    threshold: float
    min_length: int
    window: int


@dataclass(frozen=True)
class SecretRules:
    enabled: bool = False
    patterns: tuple[tuple[str, RegexMatcher], ...] = ()
    entropy: EntropyRule | None = None


@dataclass(frozen=True)
class CommandRules:
    enabled: bool = False
    block: tuple[RegexMatcher, ...] = ()
    allow: tuple[RegexMatcher, ...] = ()
    ask: tuple[RegexMatcher, ...] = ()


@dataclass(frozen=True)
class PathRules:
    enabled: bool = False
    blocked: tuple[GlobMatcher, ...] = ()


@dataclass(frozen=True)
class NetworkRules:
    enabled: bool = False
    blocked_domains: tuple[str, ...] = ()


@dataclass(frozen=True)
class ToolRules:
    allow: tuple[GlobMatcher, ...] = ()
    deny: tuple[GlobMatcher, ...] = ()
    ask: tuple[GlobMatcher, ...] = ()


@dataclass(frozen=True)
class PolicyDocument:
    """Compiled, read-only policy. Safe to share across threads."""

    name: str = "unnamed"
    mode: PolicyMode = PolicyMode.STRICT
    secrets: SecretRules = field(default_factory=SecretRules)
    commands: CommandRules = field(default_factory=CommandRules)
    paths: PathRules = field(default_factory=PathRules)
    network: NetworkRules = field(default_factory=NetworkRules)
    tools: ToolRules = field(default_factory=ToolRules)
    mcp_servers: Mapping[str, ToolRules] = field(
        default_factory=lambda: MappingProxyType({})
    )
    audit_log: str | None = None
    source: str = "<memory>"
    content_hash: str = ""


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class _Compiler:
    """Compiles pattern lists, collecting every failure instead of stopping."""

    def __init__(self) -> None:
        self.issues: list[PolicyIssue] = []

    def many(
        self, sources: list[str], compile_one: Callable[[str], T], location: str, code: str
    ) -> tuple[T, ...]:
        out: list[T] = []
        for i, src in enumerate(sources):
            try:
                out.append(compile_one(src))
            except PatternError as exc:
                self.issues.append(PolicyIssue(f"{location}[{i}]", code, str(exc)))
        return tuple(out)

    def regexes(self, sources: list[str], location: str) -> tuple[RegexMatcher, ...]:
        return self.many(sources, RegexMatcher.compile, location, "invalid_regex")

    def globs(self, sources: list[str], location: str) -> tuple[GlobMatcher, ...]:
        return self.many(sources, GlobMatcher.compile, location, "invalid_glob")

    def tools(self, section: ToolsSection | None, location: str) -> ToolRules:
        if section is None:
            return ToolRules()
        return ToolRules(
            allow=self.globs(section.allow, f"{location} → allow"),
            deny=self.globs(section.deny, f"{location} → deny"),
            ask=self.globs(section.ask, f"{location} → ask"),
        )


def build_document(config: PolicyConfig, source: str = "<memory>") -> PolicyDocument:
    """
    Compile a validated config into a :class:`PolicyDocument`.

    Raises:
        PolicyParseError: if any regex or glob fails to compile.
    """
    c = _Compiler()

    secrets = SecretRules()
    if config.secrets is not None:
        named: list[tuple[str, RegexMatcher]] = []
        for name, pattern in config.secrets.patterns.items():
            try:
                named.append((name, RegexMatcher.compile(pattern)))
            except PatternError as exc:
                c.issues.append(
                    PolicyIssue(f"secrets → patterns → {name}", "invalid_regex", str(exc))
                )
        ent = config.secrets.entropy
        secrets = SecretRules(
            enabled=config.secrets.enabled,
            patterns=tuple(named),
            entropy=EntropyRule(ent.threshold, ent.min_length, ent.window) if ent.enabled else None,
        )

    commands = CommandRules()
    if config.commands is not None:
        commands = CommandRules(
            enabled=config.commands.enabled,
            block=c.regexes(config.commands.block, "commands → block"),
            allow=c.regexes(config.commands.allow, "commands → allow"),
            ask=c.regexes(config.commands.ask, "commands → ask"),
        )

    paths = PathRules()
    if config.paths is not None:
        paths = PathRules(
            enabled=config.paths.enabled,
            blocked=c.globs(config.paths.blocked, "paths → blocked"),
        )

    network = NetworkRules()
    if config.network is not None:
        network = NetworkRules(
            enabled=config.network.enabled,
            blocked_domains=tuple(normalize_domain(d) for d in config.network.blocked_domains),
        )

    tools = c.tools(config.tools, "tools")
    servers = {
        name: c.tools(section, f"mcp_servers → {name}")
        for name, section in config.mcp_servers.items()
    }

    if c.issues:
        lines = [f"Policy pattern compilation failed in {source}:"]
        lines.extend(f"  {issue}" for issue in c.issues)
        raise PolicyParseError("\n".join(lines), issues=c.issues)

    return PolicyDocument(
        name=config.name,
        mode=config.mode,
        secrets=secrets,
        commands=commands,
        paths=paths,
        network=network,
        tools=tools,
        mcp_servers=MappingProxyType(servers),
        audit_log=config.audit_log,
        source=source,
        content_hash=config.content_hash(),
    )
