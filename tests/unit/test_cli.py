"""CLI tests using click's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from railguard import __version__
from railguard.cli.main import cli

_FIXTURES = Path(__file__).parent.parent / "policy" / "fixtures"


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for var in ("RAILGUARD_CONFIG", "RAILGUARD_AUDIT_LOG", "RAILGUARD_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _payload(tool_name: str, **tool_input: object) -> str:
    return json.dumps({"tool_name": tool_name, "tool_input": tool_input})


class TestVersion:
    def test_flag(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_json(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["version", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["railguard"] == __version__


class TestHookCommand:
    def test_allow_is_silent(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["hook"], input=_payload("Bash", command="ls -la"))
        assert result.exit_code == 0
        assert result.output == ""

    def test_deny_exits_2(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["hook"], input=_payload("Bash", command="rm -rf /"))
        assert result.exit_code == 2
        assert "Railguard blocked this action [dangerous_command]" in result.output

    def test_ask_prints_json(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["hook"], input=_payload("Bash", command="git push --force"))
        assert result.exit_code == 0
        assert json.loads(result.output)["hookSpecificOutput"]["permissionDecision"] == "ask"

    def test_garbage_input_denied(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["hook"], input="{{{")
        assert result.exit_code == 2
        assert "[invalid_input]" in result.output

    def test_missing_policy_file_denied(self, runner: CliRunner, tmp_path: Path) -> None:
        missing = tmp_path / "nope.yaml"
        result = runner.invoke(
            cli, ["--config", str(missing), "hook"], input=_payload("Bash", command="ls")
        )
        assert result.exit_code == 2
        assert "[invalid_input]" in result.output

    def test_invalid_env_settings_denied(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RAILGUARD_LOG_LEVEL", "chatty")
        result = runner.invoke(cli, ["hook"], input=_payload("Bash", command="ls"))
        assert result.exit_code == 2
        assert "[invalid_input]" in result.output

    def test_project_policy_used(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "railguard.yaml").write_text((_FIXTURES / "strict.yaml").read_text())
        result = runner.invoke(cli, ["hook"], input=_payload("mcp__slack__post", text="hi"))
        assert result.exit_code == 2
        assert "[tool_denied]" in result.output

    def test_audit_env_written(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        log = tmp_path / "audit.jsonl"
        monkeypatch.setenv("RAILGUARD_AUDIT_LOG", str(log))
        runner.invoke(cli, ["hook"], input=_payload("Bash", command="ls"))
        assert json.loads(log.read_text())["event"]["tool_name"] == "Bash"


class TestTestCommand:
    def test_deny(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["test", "Bash", '{"command": "rm -rf /"}'])
        assert result.exit_code == 2
        assert "Result: DENIED" in result.output
        assert "Policy:  safe-default (<default>)" in result.output

    def test_allow(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["test", "Bash", '{"command": "ls"}'])
        assert result.exit_code == 0
        assert "Result: ALLOWED" in result.output

    def test_explain(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["test", "Read", '{"file_path": ".env"}', "--explain"])
        assert result.exit_code == 2
        assert "file_path / path" in result.output

    def test_invalid_json(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["test", "Bash", "{oops"])
        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_non_object_input(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["test", "Bash", "[1, 2]"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_with_config(self, runner: CliRunner) -> None:
        config = str(_FIXTURES / "monitor.yaml")
        result = runner.invoke(cli, ["--config", config, "test", "Bash", '{"command": "rm -rf /"}'])
        assert result.exit_code == 0
        assert "would have been DENIED" in result.output


class TestLintCommand:
    def test_valid_file(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--config", str(_FIXTURES / "strict.yaml"), "lint"])
        assert result.exit_code == 0

    def test_broken_file(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--config", str(_FIXTURES / "broken_patterns.yaml"), "lint"])
        assert result.exit_code == 1
        assert "3 error(s)" in result.output

    def test_json(self, runner: CliRunner) -> None:
        config = str(_FIXTURES / "broken_patterns.yaml")
        result = runner.invoke(cli, ["--config", config, "lint", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error_count"] == 3

    def test_default_policy(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["lint"])
        assert result.exit_code == 0
        assert "built-in default policy" in result.output

    def test_missing_explicit_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--config", str(tmp_path / "nope.yaml"), "lint"])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestInstallCommands:
    def test_install_then_uninstall(self, runner: CliRunner, tmp_path: Path) -> None:
        settings = tmp_path / "settings.json"
        args = ["install", "--settings", str(settings), "--command", "railguard hook"]
        result = runner.invoke(cli, args)
        assert result.exit_code == 0
        assert "Installed Railguard hook" in result.output
        assert "railguard hook" in settings.read_text()

        result = runner.invoke(cli, args)
        assert "already installed" in result.output

        result = runner.invoke(cli, ["uninstall", "--settings", str(settings)])
        assert result.exit_code == 0
        assert "Removed Railguard hook" in result.output
        assert "railguard hook" not in settings.read_text()

    def test_uninstall_when_absent(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["uninstall", "--settings", str(tmp_path / "s.json")])
        assert result.exit_code == 0
        assert "was not installed" in result.output

    def test_default_settings_under_home(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["install", "--command", "railguard hook"])
        assert result.exit_code == 0
        assert (tmp_path / ".claude" / "settings.json").exists()

    def test_malformed_settings(self, runner: CliRunner, tmp_path: Path) -> None:
        settings = tmp_path / "settings.json"
        settings.write_text("{broken")
        result = runner.invoke(cli, ["install", "--settings", str(settings)])
        assert result.exit_code == 1
        assert "Error:" in result.output
