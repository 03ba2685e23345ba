"""
Railguard policy engine — deterministic allow / ask / deny for agent tool calls.

Public API::

    from railguard.core.policy import ToolInvocationRequest, inspect, resolve_policy

    document = resolve_policy()
    request = ToolInvocationRequest.from_payload({"tool_name": "Bash", "tool_input": {...}})
    inspection = inspect(request, document)
"""

from railguard.core.policy.document import PolicyDocument, build_document
from railguard.core.policy.inspector import DISPATCH_TABLE, Inspection, Scanner, inspect
from railguard.core.policy.model import PolicyConfig, PolicyMode
from railguard.core.policy.parser import (
    default_policy,
    find_policy_file,
    load_policy,
    parse_policy,
    resolve_policy,
)
from railguard.core.policy.verdict import Decision, DenyKind, ToolInvocationRequest, Verdict

__all__ = [
    "DISPATCH_TABLE",
    "Decision",
    "DenyKind",
    "Inspection",
    "PolicyConfig",
    "PolicyDocument",
    "PolicyMode",
    "Scanner",
    "ToolInvocationRequest",
    "Verdict",
    "build_document",
    "default_policy",
    "find_policy_file",
    "inspect",
    "load_policy",
    "parse_policy",
    "resolve_policy",
]
