"""Railguard exception hierarchy."""

from __future__ import annotations

from dataclasses import dataclass


class RailguardError(Exception):
    """Base exception for all Railguard errors."""


class ConfigError(RailguardError):
    """Raised when the policy document is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested policy file does not exist."""


class PatternError(ConfigError):
    """Raised when a regex or glob pattern cannot be compiled."""


@dataclass(frozen=True)
class PolicyIssue:
    """One problem found while parsing or compiling a policy document."""

    location: str
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"


class PolicyParseError(ConfigError):
    """Raised when a policy document fails to parse, validate, or compile."""

    def __init__(self, message: str, issues: list[PolicyIssue] | None = None) -> None:
        super().__init__(message)
        self.issues: list[PolicyIssue] = list(issues or [])


class InputError(RailguardError):
    """Raised when a tool-invocation request is malformed."""


class ScannerError(RailguardError):
    """Raised when a compiled pattern fails at match time (e.g. timeout)."""


class InstallError(RailguardError):
    """Raised when the hook cannot be registered with the host agent."""
