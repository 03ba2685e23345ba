"""
Inspector — routes one tool invocation to the right scanners and folds their
verdicts into a single outcome.

Evaluation order:
  1. Tool permissions. Any tool-level verdict (deny, ask or allow) is final.
  2. Content scanners, chosen per tool from :data:`DISPATCH_TABLE`. Tools
     not in the table get the conservative default: every string anywhere
     in ``tool_input`` is secret-scanned.
  3. The first deny wins; otherwise the first ask; otherwise allow.
  4. In monitor mode a deny is reported as a violation and the caller
     receives allow.

:func:`inspect` is pure: no I/O, no clocks, no mutation of its inputs.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from railguard.core.constants import MAX_INPUT_DEPTH
from railguard.core.exceptions import InputError
from railguard.core.policy.document import PolicyDocument
from railguard.core.policy.model import PolicyMode
from railguard.core.policy.scanners import (
    scan_command,
    scan_network,
    scan_path,
    scan_secrets,
    scan_tool_permission,
)
from railguard.core.policy.verdict import ToolInvocationRequest, Verdict


class Scanner(StrEnum):
    SECRET = "secret"
    COMMAND = "command"
    PATH = "path"
    NETWORK = "network"


_SCANNERS: dict[Scanner, Callable[[str, PolicyDocument], Verdict]] = {
    Scanner.SECRET: lambda text, doc: scan_secrets(text, doc.secrets),
    Scanner.COMMAND: lambda text, doc: scan_command(text, doc.commands),
    Scanner.PATH: lambda text, doc: scan_path(text, doc.paths),
    Scanner.NETWORK: lambda text, doc: scan_network(text, doc.network),
}

FieldScan = tuple[str, tuple[Scanner, ...]]

# tool name → ordered (field, scanners) pairs
DISPATCH_TABLE: Mapping[str, tuple[FieldScan, ...]] = MappingProxyType(
    {
        "Bash": (("command", (Scanner.SECRET, Scanner.COMMAND, Scanner.NETWORK)),),
        "Write": (
            ("file_path", (Scanner.PATH,)),
            ("content", (Scanner.SECRET,)),
        ),
        "Edit": (
            ("file_path", (Scanner.PATH,)),
            ("old_string", (Scanner.SECRET,)),
            ("new_string", (Scanner.SECRET,)),
        ),
        "Read": (("file_path", (Scanner.PATH,)),),
        "WebFetch": (("url", (Scanner.NETWORK,)),),
        "Task": (("prompt", (Scanner.SECRET,)),),
        "Glob": (("path", (Scanner.PATH,)),),
        "Grep": (("path", (Scanner.PATH,)),),
        "WebSearch": (("query", (Scanner.SECRET,)),),
        "NotebookEdit": (
            ("notebook_path", (Scanner.PATH,)),
            ("new_source", (Scanner.SECRET,)),
        ),
    }
)


@dataclass(frozen=True)
class ScanStep:
    """One scanner applied to one field."""

    field: str
    scanner: Scanner
    verdict: Verdict


@dataclass(frozen=True)
class Inspection:
    """
    Result of :func:`inspect`.

    ``verdict`` is what the host agent is told. ``violation`` is set only in
    monitor mode, holding the deny that would have been returned in strict
    mode.
    """

    verdict: Verdict
    violation: Verdict | None = None


# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------


def _walk_strings(value: Any, path: str, depth: int = 0) -> Iterator[tuple[str, str]]:
    if depth > MAX_INPUT_DEPTH:
        raise InputError(f"tool_input nested deeper than {MAX_INPUT_DEPTH} levels at {path!r}")
    if isinstance(value, str):
        if value:
            yield path, value
    elif isinstance(value, Mapping):
        for key, item in value.items():
            yield from _walk_strings(item, f"{path}.{key}" if path else str(key), depth + 1)
    elif isinstance(value, Sequence):
        for i, item in enumerate(value):
            yield from _walk_strings(item, f"{path}[{i}]", depth + 1)


def iter_scan_steps(
    request: ToolInvocationRequest, document: PolicyDocument
) -> Iterator[ScanStep]:
    """
    Yield content-scanner results in evaluation order.

    Lazy, so a caller that stops at the first deny never runs later scanners.

    Raises:
        InputError: if a field the dispatch table names is not a string, or
            an unknown tool's input is nested too deeply.
    """
    targets = DISPATCH_TABLE.get(request.tool_name)
    if targets is None:
        for path, text in _walk_strings(request.tool_input, ""):
            yield ScanStep(path, Scanner.SECRET, scan_secrets(text, document.secrets))
        return

    for field_name, scanners in targets:
        value = request.tool_input.get(field_name)
        if value is None or value == "":
            continue
        if not isinstance(value, str):
            raise InputError(
                f"{request.tool_name}.{field_name} must be a string "
                f"(got {type(value).__name__})"
            )
        for scanner in scanners:
            yield ScanStep(field_name, scanner, _SCANNERS[scanner](value, document))


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def evaluate(request: ToolInvocationRequest, document: PolicyDocument) -> Verdict:
    """Return the strict-mode verdict for ``request``, ignoring ``document.mode``."""
    tool_verdict = scan_tool_permission(request.tool_name, document)
    if tool_verdict is not None:
        return tool_verdict

    first_ask: Verdict | None = None
    for step in iter_scan_steps(request, document):
        if step.verdict.is_deny:
            return step.verdict
        if step.verdict.is_ask and first_ask is None:
            first_ask = step.verdict
    return first_ask or Verdict.allow()


def inspect(request: ToolInvocationRequest, document: PolicyDocument) -> Inspection:
    """
    Evaluate ``request`` against ``document`` and apply the policy mode.

    Raises:
        InputError: on malformed tool input.
        ScannerError: if a pattern exceeds its time budget.
    """
    verdict = evaluate(request, document)
    if verdict.is_deny and document.mode == PolicyMode.MONITOR:
        return Inspection(verdict=Verdict.allow(), violation=verdict)
    return Inspection(verdict=verdict)
