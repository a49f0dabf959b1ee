"""
Tests for settings module paths and defaults.
"""

from pathlib import Path

from claudy.settings import (
    DEFAULTS,
    SETTING_TYPES,
    MonitorSettings,
    get_default_projects_path,
    get_log_dir,
    get_state_dir,
)


class TestPaths:
    def test_state_dir_default(self, monkeypatch):
        monkeypatch.delenv("CLAUDY_STATE_DIR", raising=False)
        assert get_state_dir() == Path.home() / ".claudy"

    def test_state_dir_respects_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CLAUDY_STATE_DIR", str(tmp_path))
        assert get_state_dir() == tmp_path
        assert get_log_dir() == tmp_path / "logs"

    def test_projects_path_default(self, monkeypatch):
        monkeypatch.delenv("CLAUDY_PROJECTS_DIR", raising=False)
        assert get_default_projects_path() == Path.home() / ".claude" / "projects"

    def test_projects_path_respects_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CLAUDY_PROJECTS_DIR", str(tmp_path))
        assert get_default_projects_path() == tmp_path


class TestMonitorSettings:
    def test_every_setting_has_a_type(self):
        assert set(SETTING_TYPES) == set(MonitorSettings().to_dict())

    def test_defaults_match_types(self):
        for key, expected in SETTING_TYPES.items():
            assert isinstance(getattr(DEFAULTS, key), expected), key
