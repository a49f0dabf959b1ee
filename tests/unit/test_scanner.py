"""
Unit tests for scanner module.
"""

from pathlib import Path

from claudy.scanner import (
    ScanWarning,
    decode_project_dir_name,
    discover_session_files,
    is_session_file,
    iter_project_dirs,
    iter_session_files,
    session_id_for,
)


class TestIsSessionFile:
    """Test transcript path classification"""

    def test_primary_transcript(self):
        assert is_session_file(Path("/root/proj/abc-123.jsonl"))

    def test_other_suffix(self):
        assert not is_session_file(Path("/root/proj/sessions-index.json"))
        assert not is_session_file(Path("/root/proj/notes.txt"))

    def test_subagent_transcripts_excluded(self):
        """agent-* files and anything under subagents/ are not sessions."""
        assert not is_session_file(Path("/root/proj/agent-a1b2.jsonl"))
        assert not is_session_file(Path("/root/proj/abc/subagents/x.jsonl"))

    def test_session_id_is_stem(self):
        assert session_id_for(Path("/r/p/0f1e2d3c-aaaa.jsonl")) == "0f1e2d3c-aaaa"


class TestDiscovery:
    """Test walking the projects root"""

    def test_missing_root_yields_nothing(self, tmp_path):
        """A root that doesn't exist is an empty scan, not an error."""
        warnings = []
        assert list(discover_session_files(tmp_path / "nope", warnings)) == []
        assert warnings == []

    def test_finds_transcripts_in_each_project(self, projects_root):
        """Should yield every direct .jsonl child of every project dir."""
        a = projects_root / "-home-user-a"
        b = projects_root / "-home-user-b"
        a.mkdir()
        b.mkdir()
        (a / "s1.jsonl").write_text("")
        (a / "s2.jsonl").write_text("")
        (b / "s3.jsonl").write_text("")
        (b / "sessions-index.json").write_text("{}")

        found = [p.name for p in discover_session_files(projects_root)]

        assert found == ["s1.jsonl", "s2.jsonl", "s3.jsonl"]

    def test_does_not_descend_into_session_containers(self, project_dir):
        """Per-session subdirectories are skipped entirely."""
        (project_dir / "s1.jsonl").write_text("")
        nested = project_dir / "s1" / "subagents"
        nested.mkdir(parents=True)
        (nested / "agent-x.jsonl").write_text("")
        (project_dir / "s1" / "tool-output.jsonl").write_text("")
        (project_dir / "agent-y.jsonl").write_text("")

        found = list(iter_session_files(project_dir))

        assert found == [project_dir / "s1.jsonl"]

    def test_files_at_root_are_not_projects(self, projects_root):
        (projects_root / "stray.jsonl").write_text("")
        assert list(iter_project_dirs(projects_root)) == []
        assert list(discover_session_files(projects_root)) == []

    def test_unreadable_project_dir_is_warned_and_skipped(self, projects_root, monkeypatch):
        """Permission errors become ScanWarnings; other projects still scan."""
        good = projects_root / "-good"
        bad = projects_root / "-bad"
        good.mkdir()
        bad.mkdir()
        (good / "s1.jsonl").write_text("")
        (bad / "s2.jsonl").write_text("")

        real_iterdir = Path.iterdir

        def fake_iterdir(self):
            if self == bad:
                raise PermissionError(13, "Permission denied")
            return real_iterdir(self)

        monkeypatch.setattr(Path, "iterdir", fake_iterdir)

        warnings = []
        found = list(discover_session_files(projects_root, warnings))

        assert found == [good / "s1.jsonl"]
        assert warnings == [ScanWarning(path=bad, reason="Permission denied")]


class TestDecodeProjectDirName:
    def test_dash_encoded_path(self):
        assert decode_project_dir_name("-home-user-myproject") == "/home/user/myproject"

    def test_plain_name_unchanged(self):
        assert decode_project_dir_name("scratch") == "scratch"
