"""
Identity resolution: one SessionRecord per transcript, one canonical
session per slug.

The SessionTable is the only owner of SessionRecords. It merges the two
metadata sources (sessions-index.json entries and inline transcript
entries) into each record, and dedup_sessions() reduces records sharing a
slug to the most recently active one without losing custom titles.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from .index_loader import load_index
from .logging_config import get_logger
from .models import IndexEntry, SessionRecord
from .scanner import is_session_file, session_id_for
from .tailer import TailResult, tail_session

logger = get_logger("identity")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def activity_key(record: SessionRecord) -> datetime:
    """Sort key for recency; records with no timestamps sort last."""
    return record.last_activity or _EPOCH


def display_name(record: SessionRecord) -> str:
    """Human-readable name: custom title, slug, summary, then short id.

    The git branch is appended in parentheses when known.
    """
    name = record.custom_title or record.slug or record.summary or record.short_id
    branch = record.branch
    if branch:
        return f"{name} ({branch})"
    return name


def dedup_sessions(records: Iterable[SessionRecord]) -> List[SessionRecord]:
    """Reduce records to one canonical record per slug.

    Records are scanned most recently active first; the first record seen
    for a slug is canonical and later ones are dropped. A dropped record's
    custom title is merged into a canonical record that has none. Records
    without a slug are always kept.

    Titles merged by a previous pass are cleared first, so running this
    repeatedly over the same records gives the same answer.

    Returns:
        Canonical records, most recently active first (ties by id)
    """
    records = list(records)
    for record in records:
        record.merged_custom_title = None

    ordered = sorted(records, key=lambda r: r.id)
    ordered.sort(key=activity_key, reverse=True)

    canonical_by_slug: Dict[str, SessionRecord] = {}
    result = []
    for record in ordered:
        if not record.slug:
            result.append(record)
            continue

        canonical = canonical_by_slug.get(record.slug)
        if canonical is None:
            canonical_by_slug[record.slug] = record
            result.append(record)
            continue

        if canonical.custom_title is None and record.custom_title:
            canonical.merged_custom_title = record.custom_title

    return result


def _apply_index_entry(record: SessionRecord, entry: IndexEntry) -> None:
    record.index_custom_title = entry.custom_title
    record.index_summary = entry.summary
    record.first_prompt = entry.first_prompt
    record.index_message_count = entry.message_count
    record.index_git_branch = entry.git_branch
    record.index_project_path = entry.project_path
    record.touch(entry.modified)


def _clear_index_fields(record: SessionRecord) -> None:
    record.index_custom_title = None
    record.index_summary = None
    record.first_prompt = None
    record.index_message_count = None
    record.index_git_branch = None
    record.index_project_path = None


class SessionTable:
    """All known session records, keyed by session id."""

    def __init__(self):
        self._records: Dict[str, SessionRecord] = {}
        # project dir -> session id -> entry, from the latest index load
        self._index: Dict[Path, Dict[str, IndexEntry]] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._records

    def get(self, session_id: Optional[str]) -> Optional[SessionRecord]:
        if session_id is None:
            return None
        return self._records.get(session_id)

    def records(self) -> List[SessionRecord]:
        return list(self._records.values())

    def clear(self) -> None:
        self._records.clear()
        self._index.clear()

    # ── Transcripts ───────────────────────────────────────────────────

    def discover(self, path: Path) -> Optional[SessionRecord]:
        """Register a transcript and read it from byte 0.

        An already-known transcript is just tailed. Returns None for
        non-session files and for files that vanished before being read.
        """
        if not is_session_file(path):
            return None

        session_id = session_id_for(path)
        existing = self._records.get(session_id)
        if existing is not None:
            tail_session(existing)
            return existing

        record = SessionRecord(id=session_id, source_path=path, project_dir=path.parent)
        entry = self._index.get(path.parent, {}).get(session_id)
        if entry is not None:
            _apply_index_entry(record, entry)

        tail_session(record)
        if record.missing:
            return None

        self._records[session_id] = record
        logger.debug("Discovered session %s at %s", session_id, path)
        return record

    def refresh(self, path: Path) -> Optional[TailResult]:
        """Tail the record owning path, discovering it if unknown."""
        if not is_session_file(path):
            return None
        record = self._records.get(session_id_for(path))
        if record is None:
            self.discover(path)
            return None
        return tail_session(record)

    def reconcile(
        self, seen_paths: Set[Path], unreadable: Iterable[Path] = ()
    ) -> List[str]:
        """Drop records whose file is confirmed absent after a full rescan.

        A record is removed only when the rescan did not see its file and
        the file does not exist now. Records at or below an unreadable path
        (a directory the scan had to skip) are kept until a later pass can
        look again.

        Returns:
            Ids of removed records
        """
        skipped = set(unreadable)
        removed = []
        for session_id, record in list(self._records.items()):
            path = record.source_path
            if path in seen_paths:
                continue
            if path in skipped or skipped.intersection(path.parents):
                continue
            try:
                if path.exists():
                    continue
            except OSError as e:
                logger.debug("Keeping session %s, cannot stat %s: %s", session_id, path, e)
                continue
            del self._records[session_id]
            removed.append(session_id)
            logger.info("Removed session %s (file gone)", session_id)
        return removed

    # ── Index metadata ────────────────────────────────────────────────

    def apply_index(self, project_dir: Path, entries: List[IndexEntry]) -> int:
        """Replace project_dir's index metadata wholesale.

        Records of that directory missing from entries lose their
        index-sourced fields. Entries for sessions not discovered yet are
        kept and applied on discovery.

        Returns:
            Number of records that matched an entry
        """
        by_id = {entry.session_id: entry for entry in entries}
        self._index[project_dir] = by_id

        matched = 0
        for record in self._records.values():
            if record.project_dir != project_dir:
                continue
            entry = by_id.get(record.id)
            if entry is None:
                _clear_index_fields(record)
            else:
                _apply_index_entry(record, entry)
                matched += 1
        return matched

    def reload_index(self, project_dir: Path) -> int:
        """Load project_dir's index document and apply it."""
        return self.apply_index(project_dir, load_index(project_dir))

    def project_dirs(self) -> Set[Path]:
        dirs = {r.project_dir for r in self._records.values() if r.project_dir is not None}
        dirs.update(self._index.keys())
        return dirs
