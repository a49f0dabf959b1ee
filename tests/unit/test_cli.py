"""
Unit tests for CLI using Typer.

These tests verify that the CLI correctly handles commands
using Typer's CliRunner.
"""

import re
from datetime import datetime, timezone

import pytest
from typer.testing import CliRunner

from claudy import __version__
from claudy import cli as cli_module
from claudy import config
from claudy.cli import app
from claudy.watcher import WatchChannelError
from tests.fixtures import (
    assistant_line,
    custom_title_line,
    ts,
    user_line,
    write_transcript,
)


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from text."""
    return re.sub(r'\x1b\[[0-9;]*m', '', text)


runner = CliRunner()


@pytest.fixture
def populated_root(projects_root, project_dir):
    """Two sessions relative to the real clock: one fresh, one stale."""
    now = datetime.now(timezone.utc)
    write_transcript(project_dir / "aaaa1111-fresh.jsonl", [
        custom_title_line("Alpha"),
        user_line("first", ts(1, base=now)),
        assistant_line("reply", ts(0.5, base=now), input_tokens=1500, output_tokens=20),
    ])
    write_transcript(project_dir / "bbbb2222-stale.jsonl", [
        custom_title_line("Beta"),
        user_line("old", ts(45, base=now)),
    ])
    return projects_root


class TestCLICommands:
    """Test CLI commands"""

    def test_main_help(self):
        """Main help shows all commands"""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        output = strip_ansi(result.stdout)
        assert "list" in output
        assert "config" in output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.stdout.strip() == __version__


class TestListCommand:
    """Test list command"""

    def test_lists_all_sessions(self, populated_root):
        result = runner.invoke(app, ["list", "--path", str(populated_root)])

        assert result.exit_code == 0
        output = strip_ansi(result.stdout)
        assert "Alpha" in output
        assert "Beta" in output
        assert output.index("Alpha") < output.index("Beta")
        assert "1.5K" in output

    def test_active_only(self, populated_root):
        result = runner.invoke(app, ["list", "--path", str(populated_root), "--active"])

        assert result.exit_code == 0
        output = strip_ansi(result.stdout)
        assert "Alpha" in output
        assert "Beta" not in output

    def test_filter(self, populated_root):
        result = runner.invoke(app, ["list", "-p", str(populated_root), "--filter", "BETA"])

        assert result.exit_code == 0
        output = strip_ansi(result.stdout)
        assert "Beta" in output
        assert "Alpha" not in output

    def test_empty_root(self, projects_root):
        result = runner.invoke(app, ["list", "--path", str(projects_root)])

        assert result.exit_code == 0
        assert "No sessions found" in result.stdout

    def test_missing_root_fails(self, tmp_path):
        result = runner.invoke(app, ["list", "--path", str(tmp_path / "nope")])

        assert result.exit_code == 1
        assert "not found" in strip_ansi(result.output)

    def test_reports_warnings(self, populated_root, project_dir):
        with open(project_dir / "bbbb2222-stale.jsonl", "a") as f:
            f.write("{not json\n")

        result = runner.invoke(app, ["list", "--path", str(populated_root)])

        assert result.exit_code == 0
        assert "1 warning(s)" in strip_ansi(result.stdout)

    def test_projects_dir_from_environment(self, populated_root, monkeypatch):
        monkeypatch.setenv("CLAUDY_PROJECTS_DIR", str(populated_root))

        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "Alpha" in strip_ansi(result.stdout)


class TestMonitorLaunch:
    """Test the default (no subcommand) TUI launch"""

    @pytest.fixture(autouse=True)
    def no_log_file(self, monkeypatch):
        monkeypatch.setattr(cli_module, "setup_tui_logging", lambda: None)

    def test_missing_root_fails_before_tui(self, tmp_path):
        result = runner.invoke(app, ["--path", str(tmp_path / "nope")])

        assert result.exit_code == 1
        assert "not found" in strip_ansi(result.output)

    def test_runs_tui_and_stops_engine(self, projects_root, monkeypatch):
        from claudy.tui import ClaudyTUI

        seen = {}

        def fake_run(self, *args, **kwargs):
            seen["root"] = self.engine.root
            seen["watching"] = self.engine.event_source.is_running

        monkeypatch.setattr(ClaudyTUI, "run", fake_run)

        result = runner.invoke(app, ["--path", str(projects_root)])

        assert result.exit_code == 0
        assert seen["root"] == projects_root.absolute()
        assert seen["watching"] is True

    def test_watch_failure_exits_nonzero(self, projects_root, monkeypatch):
        from claudy.tui import ClaudyTUI

        def failing_run(self, *args, **kwargs):
            self.fatal_error = WatchChannelError("watch thread died")

        monkeypatch.setattr(ClaudyTUI, "run", failing_run)

        result = runner.invoke(app, ["--path", str(projects_root)])

        assert result.exit_code == 1
        assert "watch thread died" in strip_ansi(result.output)


class TestConfigCommands:
    """Test config subcommands"""

    def test_path(self):
        result = runner.invoke(app, ["config", "path"])
        assert result.exit_code == 0
        assert result.stdout.strip() == str(config.CONFIG_PATH)

    def test_show_defaults(self):
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        output = strip_ansi(result.stdout)
        assert "No config file" in output
        assert "staleness_seconds: 300.0" in output
        assert "(default)" in output

    def test_default_subcommand_is_show(self):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "staleness_seconds" in strip_ansi(result.stdout)

    def test_show_marks_configured_keys(self):
        config.CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        config.CONFIG_PATH.write_text("monitor:\n  staleness_seconds: 60\n")

        result = runner.invoke(app, ["config", "show"])

        output = strip_ansi(result.stdout)
        line = next(l for l in output.splitlines() if "staleness_seconds" in l)
        assert "60.0" in line
        assert "(default)" not in line

    def test_show_marks_environment_keys(self, monkeypatch):
        monkeypatch.setenv("CLAUDY_STALENESS_SECONDS", "900")

        result = runner.invoke(app, ["config", "show"])

        output = strip_ansi(result.stdout)
        line = next(l for l in output.splitlines() if "staleness_seconds" in l)
        assert "900.0" in line
        assert "(from CLAUDY_STALENESS_SECONDS)" in line
        assert "(default)" not in line

    def test_init_creates_file(self):
        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        assert config.CONFIG_PATH.exists()
        assert "monitor:" in config.CONFIG_PATH.read_text()

    def test_init_refuses_overwrite(self):
        config.CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        config.CONFIG_PATH.write_text("monitor:\n  auto_follow: false\n")

        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 1
        assert "already exists" in strip_ansi(result.stdout)
        assert "auto_follow: false" in config.CONFIG_PATH.read_text()

    def test_init_force_overwrites(self):
        config.CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        config.CONFIG_PATH.write_text("monitor: {}\n")

        result = runner.invoke(app, ["config", "init", "--force"])

        assert result.exit_code == 0
        assert "# monitor:" in config.CONFIG_PATH.read_text()
