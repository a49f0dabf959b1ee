"""
Core data types for the session monitor.

A SessionRecord is one transcript file on disk. Records are owned by the
SessionTable (identity.py); the tailer only advances a record's byte offset
and appends to it. Everything handed to presentation (ViewEntry,
SessionDetail) is a fresh projection, rebuilt on every view pass.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional


def parse_iso_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp ("...Z" accepted) to an aware datetime.

    Returns None for missing, malformed, or naive values.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


class MessageKind(Enum):
    """Renderable chat entry kinds."""
    USER = "user"
    ASSISTANT = "assistant"
    TOOL_USE = "tool_use"
    OTHER = "other"


@dataclass(frozen=True)
class DisplayMessage:
    """One renderable chat entry, created once per qualifying log line."""
    kind: MessageKind
    timestamp: Optional[datetime]
    content: str
    tokens_in: Optional[int] = None  # assistant only
    tokens_out: Optional[int] = None  # assistant only
    uuid: Optional[str] = None
    parent_uuid: Optional[str] = None  # id lookup only, never an owning link


@dataclass
class IndexEntry:
    """One record from a project's sessions-index.json."""
    session_id: str
    full_path: Optional[str] = None
    file_mtime: Optional[int] = None  # epoch milliseconds
    first_prompt: Optional[str] = None
    custom_title: Optional[str] = None
    summary: Optional[str] = None
    message_count: Optional[int] = None
    created: Optional[datetime] = None
    modified: Optional[datetime] = None
    git_branch: Optional[str] = None
    project_path: Optional[str] = None
    is_sidechain: bool = False


@dataclass
class SessionRecord:
    """One transcript file and everything learned about it so far.

    Metadata arrives from two independent sources, the index document and
    inline log entries, so both are kept side by side and resolved through
    properties rather than overwritten.
    """
    id: str
    source_path: Path
    project_dir: Optional[Path] = None
    slug: Optional[str] = None
    git_branch: Optional[str] = None
    working_directory: Optional[str] = None
    messages: List[DisplayMessage] = field(default_factory=list)
    tokens_in: int = 0
    tokens_out: int = 0
    last_activity: Optional[datetime] = None
    byte_offset: int = 0

    # Title/summary sources
    inline_custom_title: Optional[str] = None
    index_custom_title: Optional[str] = None
    merged_custom_title: Optional[str] = None  # reset on every dedup pass
    inline_summary: Optional[str] = None
    index_summary: Optional[str] = None

    # Index-only fields
    first_prompt: Optional[str] = None
    index_message_count: Optional[int] = None
    index_git_branch: Optional[str] = None
    index_project_path: Optional[str] = None

    progress_count: int = 0
    parse_failures: int = 0
    missing: bool = False  # backing file was gone on the last read

    @property
    def custom_title(self) -> Optional[str]:
        """Highest-priority title: index document, inline entry, then merged."""
        return self.index_custom_title or self.inline_custom_title or self.merged_custom_title

    @property
    def summary(self) -> Optional[str]:
        return self.index_summary or self.inline_summary

    @property
    def branch(self) -> Optional[str]:
        return self.git_branch or self.index_git_branch

    @property
    def cwd(self) -> Optional[str]:
        return self.working_directory or self.index_project_path

    @property
    def short_id(self) -> str:
        return self.id[:8]

    def message_count(self, include_progress: bool = False) -> int:
        """Number of rendered messages, optionally counting progress entries."""
        count = len(self.messages)
        if include_progress:
            count += self.progress_count
        return count

    def touch(self, timestamp: Optional[datetime]) -> None:
        """Raise last_activity to timestamp; never lowers it."""
        if timestamp is None:
            return
        if self.last_activity is None or timestamp > self.last_activity:
            self.last_activity = timestamp


@dataclass(frozen=True)
class ViewEntry:
    """Presentation-facing projection of one canonical session."""
    session_id: str
    display_name: str
    message_count: int
    tokens_in: int
    tokens_out: int
    is_active: bool
    last_activity: Optional[datetime]


@dataclass
class FilterState:
    """Filter and selection state, mutated only by presentation intents."""
    active_only: bool = False
    query: str = ""
    selected_id: Optional[str] = None


@dataclass(frozen=True)
class SessionDetail:
    """Full detail of the selected session for the info panel."""
    session_id: str
    title: str
    git_branch: Optional[str]
    working_directory: Optional[str]
    tokens_in: int
    tokens_out: int
    message_count: int
    is_active: bool
    summary: Optional[str]
    first_prompt: Optional[str]
    last_activity: Optional[datetime]
    source_path: Path
