"""
Hook protocol handler — the boundary between the host agent and the engine.

Wire protocol (one request per process)::

    stdin   {"tool_name": "Bash", "tool_input": {"command": "ls -la"}}

    allow   exit 0, no output
    ask     exit 0, stdout {"ask": true, "reason": "...", "hookSpecificOutput": {...}}
    deny    exit 2, stderr "Railguard blocked this action [<kind>]: <reason>"

:func:`handle_hook` is fail-closed: the only way to produce an allow or ask
response is for :func:`inspect` to return one. Every error path, including
errors raised while encoding the response, ends in a deny.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from railguard.core.audit import AuditLog
from railguard.core.constants import HOOK_EVENT_NAME, MAX_INPUT_DEPTH, ExitCode
from railguard.core.exceptions import ConfigError, InputError, ScannerError
from railguard.core.policy.document import PolicyDocument, SecretRules
from railguard.core.policy.inspector import Inspection, inspect
from railguard.core.policy.scanners import redact_secrets
from railguard.core.policy.verdict import DenyKind, ToolInvocationRequest, Verdict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HookResponse:
    exit_code: int
    stdout: str = ""
    stderr: str = ""


# Literal so that producing it cannot fail.
FAIL_CLOSED_RESPONSE = HookResponse(
    exit_code=int(ExitCode.BLOCKED),
    stderr=(
        "Railguard blocked this action [internal_error]: "
        "unexpected failure while evaluating the request\n"
        "An internal error occurred. Railguard is operating in fail-closed mode."
    ),
)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_verdict(verdict: Verdict) -> HookResponse:
    """Translate a verdict into the host agent's exit code and output streams."""
    if verdict.is_allow:
        return HookResponse(exit_code=int(ExitCode.SUCCESS))
    if verdict.is_ask:
        payload = {
            "ask": True,
            "reason": verdict.reason,
            "hookSpecificOutput": {
                "hookEventName": HOOK_EVENT_NAME,
                "permissionDecision": "ask",
                "permissionDecisionReason": verdict.reason,
            },
        }
        return HookResponse(exit_code=int(ExitCode.SUCCESS), stdout=json.dumps(payload))
    lines = [f"Railguard blocked this action [{verdict.kind}]: {verdict.reason}"]
    if verdict.context:
        lines.append(verdict.context)
    return HookResponse(exit_code=int(ExitCode.BLOCKED), stderr="\n".join(lines))


def _deny(kind: DenyKind, reason: str) -> HookResponse:
    try:
        return encode_verdict(Verdict.deny(kind, reason))
    except Exception:  # noqa: BLE001
        logger.exception("Failed to encode deny response")
        return FAIL_CLOSED_RESPONSE


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------


def _redact_value(value: Any, rules: SecretRules, depth: int = 0) -> Any:
    if depth > MAX_INPUT_DEPTH:
        return "<truncated>"
    if isinstance(value, str):
        return redact_secrets(value, rules)
    if isinstance(value, Mapping):
        return {str(k): _redact_value(v, rules, depth + 1) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_redact_value(v, rules, depth + 1) for v in value]
    return value


def build_audit_event(
    request: ToolInvocationRequest, inspection: Inspection, document: PolicyDocument
) -> dict[str, Any]:
    """Audit record for one decision. Tool input is redacted with the policy's secret rules."""
    return {
        "tool_name": request.tool_name,
        "tool_input": _redact_value(request.tool_input, document.secrets),
        "verdict": inspection.verdict.to_dict(),
        "violation": inspection.violation.to_dict() if inspection.violation else None,
        "mode": document.mode.value,
        "policy": document.name,
        "policy_hash": document.content_hash,
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def decode_request(raw: str | bytes) -> ToolInvocationRequest:
    """
    Raises:
        InputError: if ``raw`` is not UTF-8 JSON describing a tool invocation.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        payload = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InputError(f"Failed to parse request JSON: {exc}") from exc
    return ToolInvocationRequest.from_payload(payload)


def _evaluate(
    raw: str | bytes,
    load_document: Callable[[], PolicyDocument],
    audit: AuditLog | None,
) -> HookResponse:
    request = decode_request(raw)
    document = load_document()
    inspection = inspect(request, document)
    logger.debug(
        "%s → %s (policy=%s, mode=%s)",
        request.tool_name,
        inspection.verdict.decision,
        document.name,
        document.mode,
    )
    if inspection.violation is not None:
        logger.warning(
            "Monitor mode: %s would be denied [%s]",
            request.tool_name,
            inspection.violation.kind,
        )

    log = audit if audit is not None else AuditLog.resolve(document.audit_log)
    if log is not None:
        log.record(build_audit_event(request, inspection, document))
    return encode_verdict(inspection.verdict)


def handle_hook(
    raw: str | bytes,
    load_document: Callable[[], PolicyDocument],
    audit: AuditLog | None = None,
) -> HookResponse:
    """
    Decode, evaluate, audit and encode one hook request.

    ``load_document`` is called after the request is decoded, so a broken
    policy file is reported the same way as a broken request: as a deny.
    ``audit`` overrides the audit log chosen from the environment and the
    policy.

    Never raises.
    """
    try:
        return _evaluate(raw, load_document, audit)
    except (ConfigError, InputError) as exc:
        logger.warning("Rejecting request: %s", exc)
        return _deny(DenyKind.INVALID_INPUT, str(exc))
    except ScannerError as exc:
        logger.error("Scanner failure: %s", exc)
        return _deny(DenyKind.INTERNAL_ERROR, str(exc))
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error while evaluating hook request")
        return FAIL_CLOSED_RESPONSE
