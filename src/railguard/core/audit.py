"""
Audit log — append-only JSONL record of every hook decision.

Each line is one JSON object::

    {"timestamp": "2026-01-01T12:00:00.000000+00:00", "event": {...}}

Entries are never modified or deleted. The event never contains raw secret
values: tool input is redacted before it reaches this module.

Usage::

    log = AuditLog(path)
    log.record(event)

    for entry in log.tail(n=20):
        print(entry)
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from railguard.core.constants import ENV_AUDIT_LOG

logger = logging.getLogger(__name__)


class AuditLog:
    """
    Append-only JSONL writer.

    Each record is a single ``write()`` to a file opened in append mode, so
    concurrent hook processes do not interleave partial lines.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    @classmethod
    def resolve(cls, configured: str | Path | None = None) -> AuditLog | None:
        """
        Pick the audit log path: ``RAILGUARD_AUDIT_LOG`` first, then
        ``configured`` (the policy's ``audit_log``). None disables auditing.
        """
        path = os.environ.get(ENV_AUDIT_LOG) or configured
        return cls(path) if path else None

    def record(self, event: dict[str, Any]) -> None:
        """Append one event. Write failures are logged, never raised."""
        entry = {"timestamp": datetime.now(UTC).isoformat(), "event": event}
        line = json.dumps(entry, separators=(",", ":"), default=str) + "\n"
        try:
            self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(line)
        except OSError as exc:
            # Audit failure must never change the verdict
            logger.error("AuditLog: failed to write to %s: %s", self.path, exc)

    def tail(self, n: int = 50) -> list[dict[str, Any]]:
        """Return the last ``n`` entries as dicts (oldest first)."""
        return list(self)[-n:] if n > 0 else []

    def __iter__(self) -> Iterator[dict[str, Any]]:
        """Iterate over all entries (oldest first), skipping corrupt lines."""
        if not self.path.exists():
            return
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                for line in fh:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        yield json.loads(line)
                    except json.JSONDecodeError:
                        continue
        except OSError as exc:
            logger.error("AuditLog: cannot read %s: %s", self.path, exc)
