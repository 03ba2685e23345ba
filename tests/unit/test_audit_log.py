"""Unit tests for the append-only JSONL audit log."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from railguard.core.audit import AuditLog


class TestAuditLog:
    def test_record_and_tail(self, tmp_path: Path) -> None:
        log = AuditLog(tmp_path / "audit.jsonl")
        log.record({"tool_name": "Bash"})
        entries = log.tail(10)
        assert len(entries) == 1
        assert entries[0]["event"] == {"tool_name": "Bash"}

    def test_timestamp_is_utc_iso(self, tmp_path: Path) -> None:
        log = AuditLog(tmp_path / "audit.jsonl")
        log.record({})
        ts = datetime.fromisoformat(log.tail()[0]["timestamp"])
        assert ts.utcoffset() is not None
        assert ts.utcoffset().total_seconds() == 0

    def test_one_line_per_record(self, tmp_path: Path) -> None:
        path = tmp_path / "audit.jsonl"
        log = AuditLog(path)
        for i in range(5):
            log.record({"i": i, "text": "multi\nline"})
        lines = path.read_text().splitlines()
        assert len(lines) == 5
        assert [json.loads(line)["event"]["i"] for line in lines] == list(range(5))

    def test_appends_to_existing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "audit.jsonl"
        AuditLog(path).record({"n": 1})
        AuditLog(path).record({"n": 2})
        assert [e["event"]["n"] for e in AuditLog(path)] == [1, 2]

    def test_parent_directory_created(self, tmp_path: Path) -> None:
        log = AuditLog(tmp_path / "deep" / "dir" / "audit.jsonl")
        log.record({"ok": True})
        assert log.path.exists()

    def test_tail_empty_when_no_file(self, tmp_path: Path) -> None:
        assert AuditLog(tmp_path / "missing.jsonl").tail() == []

    def test_tail_n_limit(self, tmp_path: Path) -> None:
        log = AuditLog(tmp_path / "audit.jsonl")
        for i in range(10):
            log.record({"i": i})
        entries = log.tail(3)
        assert [e["event"]["i"] for e in entries] == [7, 8, 9]

    def test_corrupt_lines_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "audit.jsonl"
        log = AuditLog(path)
        log.record({"i": 1})
        with path.open("a") as fh:
            fh.write("not json\n\n")
        log.record({"i": 2})
        assert [e["event"]["i"] for e in log] == [1, 2]

    def test_write_failure_logged_not_raised(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        log = AuditLog(blocker / "audit.jsonl")
        log.record({"i": 1})
        assert "failed to write" in caplog.text


class TestResolve:
    def test_env_takes_priority(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RAILGUARD_AUDIT_LOG", str(tmp_path / "env.jsonl"))
        log = AuditLog.resolve(tmp_path / "policy.jsonl")
        assert log is not None
        assert log.path == tmp_path / "env.jsonl"

    def test_policy_path_used_without_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("RAILGUARD_AUDIT_LOG", raising=False)
        log = AuditLog.resolve(str(tmp_path / "policy.jsonl"))
        assert log is not None
        assert log.path == tmp_path / "policy.jsonl"

    def test_disabled_when_nothing_configured(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("RAILGUARD_AUDIT_LOG", raising=False)
        assert AuditLog.resolve(None) is None
