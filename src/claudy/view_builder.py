"""
Build the presentation view from the session table.

Pure functions over records and FilterState. The pipeline order is fixed:

    dedup -> active-only filter -> free-text filter -> selection

Selection persistence: the previously selected id stays selected while it
is still in the result; otherwise the first entry is selected; an empty
result clears the selection. Background churn alone never moves it.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .identity import dedup_sessions, display_name
from .models import FilterState, SessionRecord, ViewEntry

DEFAULT_STALENESS_SECONDS = 300.0


@dataclass
class ViewResult:
    entries: List[ViewEntry]
    selected_id: Optional[str] = None
    selected_index: Optional[int] = None

    @property
    def ids(self) -> List[str]:
        return [e.session_id for e in self.entries]


def is_active(
    record: SessionRecord,
    now: datetime,
    threshold_seconds: float = DEFAULT_STALENESS_SECONDS,
) -> bool:
    """True if record saw activity within threshold_seconds of now."""
    if record.last_activity is None:
        return False
    return (now - record.last_activity).total_seconds() <= threshold_seconds


def matches_query(record: SessionRecord, query: str) -> bool:
    """Case-insensitive substring match on display name, id, and summary."""
    needle = query.lower()
    haystacks = (display_name(record), record.id, record.summary or "")
    return any(needle in h.lower() for h in haystacks)


def filter_sessions(
    records: List[SessionRecord],
    filter_state: FilterState,
    now: datetime,
    staleness_seconds: float = DEFAULT_STALENESS_SECONDS,
) -> List[SessionRecord]:
    """Apply the active-only and free-text filters, preserving order."""
    result = records
    if filter_state.active_only:
        result = [r for r in result if is_active(r, now, staleness_seconds)]
    query = filter_state.query.strip()
    if query:
        result = [r for r in result if matches_query(r, query)]
    return result


def resolve_selection(ids: List[str], previous: Optional[str]) -> Optional[str]:
    """Keep previous if still listed, else the first id, else None."""
    if previous is not None and previous in ids:
        return previous
    return ids[0] if ids else None


def to_view_entry(
    record: SessionRecord,
    now: datetime,
    staleness_seconds: float = DEFAULT_STALENESS_SECONDS,
    include_progress: bool = False,
) -> ViewEntry:
    return ViewEntry(
        session_id=record.id,
        display_name=display_name(record),
        message_count=record.message_count(include_progress),
        tokens_in=record.tokens_in,
        tokens_out=record.tokens_out,
        is_active=is_active(record, now, staleness_seconds),
        last_activity=record.last_activity,
    )


def build_view(
    records: Iterable[SessionRecord],
    filter_state: FilterState,
    now: Optional[datetime] = None,
    staleness_seconds: float = DEFAULT_STALENESS_SECONDS,
    include_progress: bool = False,
) -> ViewResult:
    """Produce the ordered, filtered view and resolve the selection.

    Args:
        records: Every known record (dedup happens here)
        filter_state: Current filters; selected_id is updated in place
        now: Reference time for the active filter (defaults to UTC now)
        staleness_seconds: Active-only window
        include_progress: Count progress entries in message_count badges

    Returns:
        ViewResult with entries most recently active first
    """
    if now is None:
        now = datetime.now(timezone.utc)

    canonical = dedup_sessions(records)
    visible = filter_sessions(canonical, filter_state, now, staleness_seconds)
    entries = [to_view_entry(r, now, staleness_seconds, include_progress) for r in visible]

    ids = [e.session_id for e in entries]
    selected = resolve_selection(ids, filter_state.selected_id)
    filter_state.selected_id = selected

    return ViewResult(
        entries=entries,
        selected_id=selected,
        selected_index=ids.index(selected) if selected is not None else None,
    )
