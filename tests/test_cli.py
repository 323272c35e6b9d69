"""End-to-end runs of the react2shell-check command."""

import json
import subprocess
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

import cli
import remediation
import search_paths

runner = CliRunner()


@pytest.fixture
def npm_calls(monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(remediation.shutil, "which", lambda name: "npm")
    monkeypatch.setattr(remediation.subprocess, "run", fake_run)
    return calls


def _backups(root: Path):
    return list(root.rglob("package.json.backup.*"))


def test_short_help_exits_cleanly():
    result = runner.invoke(cli.app, ["-h"])
    assert result.exit_code == 0
    assert "--dry-run" in result.output


def test_nothing_found_exits_zero(tmp_path, make_manifest, npm_calls):
    make_manifest(tmp_path / "app", react="18.3.1")

    result = runner.invoke(cli.app, [str(tmp_path)])

    assert result.exit_code == 0
    assert "No vulnerable versions found" in result.output
    assert npm_calls == []


def test_dry_run_changes_nothing_even_when_confirmed(project_tree, npm_calls):
    result = runner.invoke(cli.app, ["--dry-run", str(project_tree)], input="y\n")

    assert result.exit_code == 0
    assert "DRY-RUN" in result.output
    assert "Would execute" in result.output
    assert npm_calls == []
    assert _backups(project_tree) == []


def test_confirmed_update_backs_up_and_runs_npm(project_tree, npm_calls):
    result = runner.invoke(cli.app, [str(project_tree)], input="yes\n")

    assert result.exit_code == 0
    assert "Successfully updated" in result.output
    assert "1 project(s) updated" in result.output
    assert len(npm_calls) == 1
    cmd, kwargs = npm_calls[0]
    assert cmd[1:4] == ["install", "react@19.1.2", "react-dom@19.1.2"]
    assert kwargs["cwd"] == str(project_tree / "vulnerable-app")
    backups = _backups(project_tree)
    assert [b.parent.name for b in backups] == ["vulnerable-app"]


def test_declined_update_is_skipped(project_tree, npm_calls):
    result = runner.invoke(cli.app, [str(project_tree)], input="n\n")

    assert result.exit_code == 0
    assert "Skipped" in result.output
    assert "remain vulnerable" in result.output
    assert npm_calls == []
    assert _backups(project_tree) == []


def test_end_of_input_declines(project_tree, npm_calls):
    result = runner.invoke(cli.app, [str(project_tree)], input="")

    assert result.exit_code == 0
    assert npm_calls == []


def test_invalid_manifest_does_not_abort_scan(tmp_path, make_manifest, npm_calls):
    (tmp_path / "broken").mkdir()
    (tmp_path / "broken" / "package.json").write_text("{oops", encoding="utf-8")
    make_manifest(tmp_path / "app", react="19.0.0")

    result = runner.invoke(cli.app, ["--dry-run", str(tmp_path)], input="n\n")

    assert result.exit_code == 0
    assert "1 skipped" in result.output
    assert "1 vulnerable installation(s) found" in result.output


def test_report_and_session_log(project_tree, tmp_path, npm_calls):
    report = tmp_path / "report.json"
    logs = tmp_path / "logs"

    result = runner.invoke(
        cli.app,
        [str(project_tree), "--output", str(report), "--log-dir", str(logs)],
        input="y\n",
    )

    assert result.exit_code == 0
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["summary"]["vulnerable_projects"] == 1
    assert data["findings"][0]["directory"] == str(project_tree / "vulnerable-app")
    assert data["remediation"]["updated"] == 1
    assert data["dry_run"] is False

    log_files = list(logs.glob("session_*.log"))
    findings_files = list(logs.glob("findings_*.json"))
    assert len(log_files) == 1 and len(findings_files) == 1
    log = log_files[0].read_text(encoding="utf-8")
    assert "SCAN START" in log
    assert "FINDING: react ^19.1.0 -> 19.1.2" in log
    assert "SESSION SUMMARY" in log
    assert json.loads(findings_files[0].read_text(encoding="utf-8"))["total_findings"] == 1
    assert "Findings saved" in result.output


def test_unusable_path_argument_does_not_abort_run(project_tree, npm_calls):
    too_long = "/" + "x" * 5000

    result = runner.invoke(cli.app, ["--dry-run", too_long, str(project_tree)], input="n\n")

    assert result.exit_code == 0
    assert result.exception is None
    assert "1 vulnerable installation(s) found" in result.output


def test_default_roots_come_from_search_paths(project_tree, npm_calls, monkeypatch):
    seen = []

    def fake_defaults(elevated):
        seen.append(elevated)
        return [project_tree]

    monkeypatch.setattr(cli, "is_elevated", lambda: False)
    monkeypatch.setattr(cli, "default_search_paths", fake_defaults)

    result = runner.invoke(cli.app, ["--dry-run"], input="n\n")

    assert result.exit_code == 0
    assert seen == [False]
    assert "system-wide locations" in result.output
    assert "1 vulnerable installation(s) found" in result.output


def test_default_search_paths_without_privileges(tmp_path, monkeypatch):
    monkeypatch.setattr(search_paths.Path, "home", lambda: tmp_path)
    assert search_paths.default_search_paths(False) == [tmp_path]


def test_default_search_paths_as_root_deduplicates_home(monkeypatch):
    monkeypatch.setattr(search_paths.Path, "home", lambda: Path("/root"))
    monkeypatch.setattr(search_paths, "system_search_paths", lambda: ["/root", "/home", "/opt"])

    assert search_paths.default_search_paths(True) == [Path("/root"), Path("/home"), Path("/opt")]


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX privilege check")
def test_is_elevated_follows_effective_uid(monkeypatch):
    monkeypatch.setattr(search_paths.os, "geteuid", lambda: 0)
    assert search_paths.is_elevated()
    monkeypatch.setattr(search_paths.os, "geteuid", lambda: 1000)
    assert not search_paths.is_elevated()
