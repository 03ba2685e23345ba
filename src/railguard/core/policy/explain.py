"""
Policy explain — human-readable output for ``railguard test --explain``.

Usage::

    print(explain_verdict(inspection))
    print(explain_request(request, document))
"""

from __future__ import annotations

from railguard.core.policy.document import PolicyDocument
from railguard.core.policy.inspector import (
    DISPATCH_TABLE,
    Inspection,
    inspect,
    iter_scan_steps,
)
from railguard.core.policy.scanners import scan_tool_permission
from railguard.core.policy.verdict import ToolInvocationRequest, Verdict

_RESULT_LABELS = {"allow": "ALLOWED", "ask": "ASK", "deny": "DENIED"}


def result_label(verdict: Verdict) -> str:
    return _RESULT_LABELS[verdict.decision.value]


def explain_verdict(inspection: Inspection) -> str:
    """Format an :class:`Inspection` as a short multi-line summary."""
    verdict = inspection.verdict
    lines = [f"Result: {result_label(verdict)}"]
    if verdict.reason:
        lines.append(f"Reason: {verdict.reason}")
    if verdict.context:
        lines.append(f"Hint:   {verdict.context}")
    if inspection.violation is not None:
        v = inspection.violation
        lines.append(f"Monitor: would have been DENIED [{v.kind}] {v.reason}")
    return "\n".join(lines)


def explain_request(request: ToolInvocationRequest, document: PolicyDocument) -> str:
    """
    Walk every check that applies to ``request`` and show each outcome,
    then the final decision.

    Unlike :func:`inspect`, the walk does not stop at the first deny, so the
    output shows everything the policy objects to.
    """
    lines: list[str] = []
    lines.append(
        f"Policy: {document.name!r}  (mode={document.mode}, hash={document.content_hash})"
    )
    lines.append(f"Source: {document.source}")
    if request.tool_name in DISPATCH_TABLE:
        routing = "dispatch table"
    else:
        routing = "all strings (unknown tool)"
    lines.append(f"Input:  tool={request.tool_name!r}  fields={routing}")
    lines.append("")

    tool_verdict = scan_tool_permission(request.tool_name, document)
    if tool_verdict is not None:
        lines.append(f"  {'tools':<24s} [{tool_verdict.decision.upper()}] {tool_verdict.reason}")
        lines.append("      tool-level decision is final; content scanners skipped")
    else:
        lines.append(f"  {'tools':<24s} [no match]")
        for step in iter_scan_steps(request, document):
            label = f"{step.field} / {step.scanner}"
            status = step.verdict.decision.upper()
            detail = f" {step.verdict.reason}" if step.verdict.reason else ""
            lines.append(f"  {label:<24s} [{status}]{detail}")

    lines.append("")
    lines.append(explain_verdict(inspect(request, document)))
    return "\n".join(lines)
