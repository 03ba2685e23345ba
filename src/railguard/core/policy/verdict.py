"""
Verdicts and tool-invocation requests.

A :class:`Verdict` is the three-way outcome of evaluating one request. Deny
verdicts always carry a machine-matchable :class:`DenyKind` plus a
human-readable reason and a fixed remediation hint.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from railguard.core.exceptions import InputError


class Decision(StrEnum):
    ALLOW = "allow"
    ASK = "ask"
    DENY = "deny"


class DenyKind(StrEnum):
    SECRET_DETECTED = "secret_detected"
    DANGEROUS_COMMAND = "dangerous_command"
    PROTECTED_PATH = "protected_path"
    NETWORK_EXFILTRATION = "network_exfiltration"
    TOOL_DENIED = "tool_denied"
    INVALID_INPUT = "invalid_input"
    INTERNAL_ERROR = "internal_error"


_CONTEXT: dict[DenyKind, str] = {
    DenyKind.SECRET_DETECTED: (
        "This content contains secrets. Use environment variables or a secrets manager instead."
    ),
    DenyKind.DANGEROUS_COMMAND: (
        "This command matches a dangerous pattern. "
        "Use more targeted commands or adjust your policy."
    ),
    DenyKind.PROTECTED_PATH: "This file is protected by policy. Check railguard.yaml for paths.",
    DenyKind.NETWORK_EXFILTRATION: (
        "This domain is blocked to prevent data exfiltration. Adjust network.blocked_domains "
        "if it is needed."
    ),
    DenyKind.TOOL_DENIED: "This tool is disabled by policy (tools.deny).",
    DenyKind.INVALID_INPUT: (
        "The request or the policy could not be read. Railguard is operating in fail-closed mode."
    ),
    DenyKind.INTERNAL_ERROR: (
        "An internal error occurred. Railguard is operating in fail-closed mode."
    ),
}


@dataclass(frozen=True)
class Verdict:
    decision: Decision
    reason: str = ""
    kind: DenyKind | None = None

    @classmethod
    def allow(cls) -> Verdict:
        return cls(Decision.ALLOW)

    @classmethod
    def ask(cls, reason: str) -> Verdict:
        return cls(Decision.ASK, reason)

    @classmethod
    def deny(cls, kind: DenyKind, reason: str) -> Verdict:
        return cls(Decision.DENY, reason, kind)

    @property
    def is_allow(self) -> bool:
        return self.decision == Decision.ALLOW

    @property
    def is_ask(self) -> bool:
        return self.decision == Decision.ASK

    @property
    def is_deny(self) -> bool:
        return self.decision == Decision.DENY

    @property
    def context(self) -> str | None:
        """Remediation hint shown to the agent alongside a deny."""
        return _CONTEXT.get(self.kind) if self.kind is not None else None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"decision": self.decision.value}
        if self.reason:
            data["reason"] = self.reason
        if self.kind is not None:
            data["kind"] = self.kind.value
        return data


@dataclass(frozen=True)
class ToolInvocationRequest:
    """One PreToolUse request from the host agent."""

    tool_name: str
    tool_input: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> ToolInvocationRequest:
        """
        Validate a decoded JSON payload.

        Raises:
            InputError: if the payload is not an object, ``tool_name`` is
                missing or not a non-empty string, or ``tool_input`` is not
                an object.
        """
        if not isinstance(payload, Mapping):
            raise InputError(f"request must be a JSON object (got {type(payload).__name__})")
        tool_name = payload.get("tool_name")
        if not isinstance(tool_name, str) or not tool_name:
            raise InputError("missing or non-string tool_name")
        tool_input = payload.get("tool_input")
        if tool_input is None:
            tool_input = {}
        if not isinstance(tool_input, Mapping):
            raise InputError(f"tool_input must be a JSON object (got {type(tool_input).__name__})")
        return cls(tool_name=tool_name, tool_input=MappingProxyType(dict(tool_input)))
