"""railguard hook — stdin/stdout/exit-code adapter around :func:`handle_hook`."""

from __future__ import annotations

import sys
from typing import NoReturn

from railguard.core.audit import AuditLog
from railguard.core.config import RailguardSettings
from railguard.core.hook import HookResponse, encode_verdict, handle_hook
from railguard.core.policy.parser import resolve_policy
from railguard.core.policy.verdict import DenyKind, Verdict


def _emit(response: HookResponse) -> NoReturn:
    if response.stdout:
        sys.stdout.write(response.stdout + "\n")
        sys.stdout.flush()
    if response.stderr:
        sys.stderr.write(response.stderr + "\n")
        sys.stderr.flush()
    sys.exit(response.exit_code)


def reject(exc: Exception) -> NoReturn:
    """Deny without evaluating (e.g. the process settings are invalid)."""
    _emit(encode_verdict(Verdict.deny(DenyKind.INVALID_INPUT, str(exc))))


def cmd_hook(settings: RailguardSettings) -> NoReturn:
    try:
        raw = sys.stdin.buffer.read()
    except OSError as exc:
        reject(exc)

    audit = AuditLog(settings.audit_log) if settings.audit_log else None
    _emit(
        handle_hook(
            raw,
            load_document=lambda: resolve_policy(settings.config_path),
            audit=audit,
        )
    )
