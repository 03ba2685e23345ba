"""
Railguard policy schema — the raw, validated shape of ``railguard.yaml``.

This is what the YAML document deserializes into. It holds pattern *source*
strings only; :func:`railguard.core.policy.document.build_document` compiles
it into the immutable :class:`PolicyDocument` the scanners read.

A section that is absent from the document is ``None`` and its scanner is
disabled. Inside a present section, omitted fields default to enabled with
empty pattern lists.
"""

from __future__ import annotations

import hashlib
import json
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from railguard.core.constants import (
    DEFAULT_ENTROPY_MIN_LENGTH,
    DEFAULT_ENTROPY_THRESHOLD,
    DEFAULT_ENTROPY_WINDOW,
)


class PolicyMode(StrEnum):
    STRICT = "strict"
    MONITOR = "monitor"  # log would-be denials, never block


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class EntropySection(_Section):
    enabled: bool = True
    threshold: float = Field(default=DEFAULT_ENTROPY_THRESHOLD, gt=0)
    min_length: int = Field(default=DEFAULT_ENTROPY_MIN_LENGTH, ge=8)
    window: int = Field(default=DEFAULT_ENTROPY_WINDOW, ge=8)

    @model_validator(mode="after")
    def window_covers_min_length(self) -> EntropySection:
        if self.window < self.min_length:
            raise ValueError("entropy window must be >= min_length")
        return self


class SecretsSection(_Section):
    enabled: bool = True
    # name → regex; YAML mapping order is the evaluation order
    patterns: dict[str, str] = Field(default_factory=dict)
    entropy: EntropySection = Field(default_factory=EntropySection)


class CommandsSection(_Section):
    enabled: bool = True
    block: list[str] = Field(default_factory=list)
    allow: list[str] = Field(default_factory=list)
    ask: list[str] = Field(default_factory=list)


class PathsSection(_Section):
    enabled: bool = True
    blocked: list[str] = Field(default_factory=list)


class NetworkSection(_Section):
    enabled: bool = True
    blocked_domains: list[str] = Field(default_factory=list)

    @field_validator("blocked_domains")
    @classmethod
    def plain_domains_only(cls, v: list[str]) -> list[str]:
        for domain in v:
            d = domain.strip().rstrip(".")
            if not d or any(ch in d for ch in "/:*@ \t"):
                raise ValueError(f"{domain!r} is not a plain domain name (e.g. 'pastebin.com')")
        return v


class ToolsSection(_Section):
    allow: list[str] = Field(default_factory=list)
    deny: list[str] = Field(default_factory=list)
    ask: list[str] = Field(default_factory=list)


class PolicyConfig(_Section):
    """Root of a policy document."""

    name: str = "unnamed"
    mode: PolicyMode = PolicyMode.STRICT
    secrets: SecretsSection | None = None
    commands: CommandsSection | None = None
    paths: PathsSection | None = None
    network: NetworkSection | None = None
    tools: ToolsSection | None = None
    # integration server name → tool permissions for mcp__<server>__* tools
    mcp_servers: dict[str, ToolsSection] = Field(default_factory=dict)
    audit_log: str | None = None

    @field_validator("mcp_servers")
    @classmethod
    def server_names_valid(cls, v: dict[str, ToolsSection]) -> dict[str, ToolsSection]:
        for server in v:
            if not server or "__" in server:
                raise ValueError(f"invalid integration server name {server!r}")
        return v

    def content_hash(self) -> str:
        """Stable 16-hex-char digest of the document, used in audit records."""
        canonical = json.dumps(self.model_dump(mode="json"), separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]
