"""
Unit tests for core data types.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from claudy.models import (
    DisplayMessage,
    FilterState,
    MessageKind,
    SessionRecord,
    parse_iso_timestamp,
)


def make_record(**kwargs) -> SessionRecord:
    return SessionRecord(id="abcdef12-3456", source_path=Path("/p/abcdef12-3456.jsonl"), **kwargs)


class TestParseIsoTimestamp:
    """Tests for parse_iso_timestamp"""

    def test_zulu_suffix(self):
        assert parse_iso_timestamp("2025-06-15T12:00:00.123Z") == datetime(
            2025, 6, 15, 12, 0, 0, 123000, tzinfo=timezone.utc
        )

    def test_explicit_offset(self):
        parsed = parse_iso_timestamp("2025-06-15T14:00:00+02:00")
        assert parsed == datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "yesterday", 1718452800, "2025-06-15T12:00:00"])
    def test_rejects_invalid_or_naive(self, value):
        assert parse_iso_timestamp(value) is None


class TestSessionRecord:
    """Tests for SessionRecord metadata resolution"""

    def test_touch_only_moves_forward(self):
        record = make_record()
        earlier = datetime(2025, 6, 15, 11, 0, tzinfo=timezone.utc)
        later = earlier + timedelta(minutes=5)

        record.touch(later)
        record.touch(earlier)
        record.touch(None)

        assert record.last_activity == later

    def test_custom_title_priority(self):
        record = make_record(merged_custom_title="merged")
        assert record.custom_title == "merged"

        record.inline_custom_title = "inline"
        assert record.custom_title == "inline"

        record.index_custom_title = "indexed"
        assert record.custom_title == "indexed"

    def test_summary_prefers_index(self):
        record = make_record(inline_summary="inline")
        assert record.summary == "inline"
        record.index_summary = "indexed"
        assert record.summary == "indexed"

    def test_branch_and_cwd_fall_back_to_index(self):
        record = make_record(index_git_branch="main", index_project_path="/home/u/proj")
        assert record.branch == "main"
        assert record.cwd == "/home/u/proj"

        record.git_branch = "feature"
        record.working_directory = "/tmp/wt"
        assert record.branch == "feature"
        assert record.cwd == "/tmp/wt"

    def test_short_id(self):
        assert make_record().short_id == "abcdef12"

    def test_message_count_with_progress(self):
        msg = DisplayMessage(kind=MessageKind.USER, timestamp=None, content="hi")
        record = make_record(messages=[msg, msg], progress_count=3)

        assert record.message_count() == 2
        assert record.message_count(include_progress=True) == 5


def test_filter_state_defaults():
    state = FilterState()
    assert state.active_only is False
    assert state.query == ""
    assert state.selected_id is None
