"""
Monitor engine: the single control thread over all session state.

The engine owns the SessionTable and the filter/selection state. Nothing
else mutates them. Each tick:

1. drains every queued filesystem event and routes it
   (transcript modified -> tail, transcript created -> discover,
   index modified -> reload that project's index),
2. answers a queue overflow with a full rescan,
3. runs the backstop pass (index reload + rescan + reconcile) when the
   refresh interval has elapsed,
4. rebuilds the view exactly once.

Presentation code reads snapshots (view_entries, selected_detail(),
selected_messages()) and sends intents (select_id, set_filter, ...). It is
called from the same thread as tick(), so there is no locking here.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from .identity import SessionTable, display_name
from .index_loader import is_index_file
from .logging_config import get_structured_logger
from .models import DisplayMessage, FilterState, SessionDetail, SessionRecord, ViewEntry
from .protocols import EventSource
from .scanner import (
    ScanWarning,
    decode_project_dir_name,
    is_session_file,
    iter_project_dirs,
    iter_session_files,
)
from .settings import MonitorSettings
from .view_builder import ViewResult, build_view, is_active
from .watcher import SessionWatcher, WatchEvent, WatchEventKind

log = get_structured_logger("engine")


class RootNotFoundError(FileNotFoundError):
    """The projects root does not exist or is not a directory."""


def _decoded_project_path(record: SessionRecord) -> Optional[str]:
    """Working directory guessed from the project folder name."""
    if record.project_dir is None:
        return None
    return decode_project_dir_name(record.project_dir.name)


@dataclass
class EngineState:
    """Everything the engine knows, in one place."""
    table: SessionTable = field(default_factory=SessionTable)
    filter: FilterState = field(default_factory=FilterState)
    view: ViewResult = field(default_factory=lambda: ViewResult(entries=[]))
    auto_follow: bool = True
    scroll_to_bottom_pending: bool = False
    scan_warnings: List[ScanWarning] = field(default_factory=list)
    last_backstop: Optional[float] = None  # monotonic seconds
    last_tick: Optional[datetime] = None
    should_quit: bool = False


class MonitorEngine:
    """Discover, tail, and present Claude session transcripts under a root."""

    def __init__(
        self,
        root: Path,
        event_source: Optional[EventSource] = None,
        settings: Optional[MonitorSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.root = Path(root).expanduser().absolute()
        self.settings = settings or MonitorSettings()
        if event_source is None:
            event_source = SessionWatcher(
                self.root,
                max_queue=self.settings.max_queue_events,
                debounce_ms=self.settings.watch_debounce_ms,
            )
        self.event_source = event_source
        self.state = EngineState(auto_follow=self.settings.auto_follow)
        self._clock = clock

    # ── Lifecycle ─────────────────────────────────────────────────────

    def _check_root(self) -> None:
        if not self.root.is_dir():
            raise RootNotFoundError(f"projects directory not found: {self.root}")

    def load(self, now: Optional[datetime] = None) -> None:
        """Scan the root once and build the view, without watching.

        Raises:
            RootNotFoundError: root is missing or not a directory
        """
        self._check_root()
        self.full_scan()
        self.state.last_backstop = self._clock()
        self._rebuild_view(now)

    def start(self) -> None:
        """Start watching, scan everything once, and build the first view.

        Raises:
            RootNotFoundError: root is missing or not a directory
            WatchChannelError: the event source could not start
        """
        self._check_root()
        # Watch first so nothing written during the initial scan is missed
        self.event_source.start()
        self.load()
        log.info("Engine started", root=self.root, sessions=len(self.state.table))

    def stop(self) -> None:
        self.event_source.stop()

    def tick(self, now: Optional[datetime] = None) -> int:
        """Apply pending filesystem changes and rebuild the view once.

        Args:
            now: Reference time for activity checks (defaults to UTC now)

        Returns:
            Number of events applied

        Raises:
            WatchChannelError: the notification channel failed
        """
        before_id = self.state.filter.selected_id
        before_count = self._selected_message_total()

        events = self._coalesce(self.event_source.poll())
        for event in events:
            self._apply_event(event)

        if self.event_source.consume_overflow():
            log.warning("Event queue overflowed; rescanning")
            self._run_backstop()
        elif self._backstop_due():
            self._run_backstop()

        self._rebuild_view(now)
        self.state.last_tick = now or datetime.now(timezone.utc)

        if (
            self.state.filter.selected_id == before_id
            and self._selected_message_total() > before_count
        ):
            self._request_scroll()
        return len(events)

    # ── Scanning ──────────────────────────────────────────────────────

    def full_scan(self) -> int:
        """Reload every index, discover every transcript, drop vanished ones.

        Returns:
            Number of transcripts seen
        """
        warnings: List[ScanWarning] = []
        seen = set()
        table = self.state.table
        for project_dir in iter_project_dirs(self.root, warnings):
            table.reload_index(project_dir)
            for path in iter_session_files(project_dir, warnings):
                seen.add(path)
                table.discover(path)

        removed = table.reconcile(seen, unreadable=[w.path for w in warnings])
        self.state.scan_warnings = warnings
        log.debug("Full scan", transcripts=len(seen), removed=len(removed),
                  warnings=len(warnings))
        return len(seen)

    def _backstop_due(self) -> bool:
        last = self.state.last_backstop
        if last is None:
            return True
        return self._clock() - last >= self.settings.index_refresh_interval

    def _run_backstop(self) -> None:
        self.full_scan()
        self.state.last_backstop = self._clock()

    def _coalesce(self, events: List[WatchEvent]) -> List[WatchEvent]:
        """Drop repeated events, keeping first-arrival order."""
        unique = []
        seen = set()
        for event in events:
            if event in seen:
                continue
            seen.add(event)
            unique.append(event)
        return unique

    def _is_transcript(self, path: Path) -> bool:
        return is_session_file(path) and path.parent.parent == self.root

    def _apply_event(self, event: WatchEvent) -> None:
        path = event.path
        table = self.state.table

        if is_index_file(path):
            if path.parent.parent == self.root:
                table.reload_index(path.parent)
            return

        if not self._is_transcript(path):
            return

        if event.kind is WatchEventKind.FILE_CREATED:
            table.discover(path)
        else:
            table.refresh(path)

    # ── View ──────────────────────────────────────────────────────────

    def _rebuild_view(self, now: Optional[datetime] = None) -> None:
        previous = self.state.view.selected_id
        self.state.view = build_view(
            self.state.table.records(),
            self.state.filter,
            now=now,
            staleness_seconds=self.settings.staleness_seconds,
            include_progress=self.settings.count_progress_messages,
        )
        if self.state.view.selected_id != previous and self.state.view.selected_id is not None:
            self._request_scroll()

    def _request_scroll(self) -> None:
        if self.state.auto_follow:
            self.state.scroll_to_bottom_pending = True

    def _selected_message_total(self) -> int:
        record = self.state.table.get(self.state.filter.selected_id)
        return len(record.messages) if record is not None else 0

    # ── Intents ───────────────────────────────────────────────────────

    def select_id(self, session_id: str) -> bool:
        """Select a session currently in the view.

        Returns:
            False if session_id is not visible
        """
        ids = self.state.view.ids
        if session_id not in ids:
            return False
        changed = session_id != self.state.filter.selected_id
        self.state.filter.selected_id = session_id
        self.state.view.selected_id = session_id
        self.state.view.selected_index = ids.index(session_id)
        if changed:
            self._request_scroll()
        return True

    def select_index(self, index: int) -> bool:
        entries = self.state.view.entries
        if not 0 <= index < len(entries):
            return False
        return self.select_id(entries[index].session_id)

    def move_selection(self, delta: int) -> bool:
        """Move the selection by delta rows, clamped to the view."""
        entries = self.state.view.entries
        if not entries:
            return False
        current = self.state.view.selected_index or 0
        target = max(0, min(len(entries) - 1, current + delta))
        return self.select_index(target)

    def set_filter(self, text: str) -> None:
        self.state.filter.query = text
        self._rebuild_view()

    def toggle_active_only(self) -> bool:
        self.state.filter.active_only = not self.state.filter.active_only
        self._rebuild_view()
        return self.state.filter.active_only

    def set_auto_follow(self, enabled: bool) -> None:
        self.state.auto_follow = enabled
        self._request_scroll()

    def force_refresh(self) -> None:
        """Forget all parsed state and re-read every transcript from byte 0."""
        self.state.table.clear()
        self.full_scan()
        self.state.last_backstop = self._clock()
        self._rebuild_view()
        self._request_scroll()
        log.info("Forced refresh", sessions=len(self.state.table))

    def quit(self) -> None:
        self.state.should_quit = True

    # ── Snapshots ─────────────────────────────────────────────────────

    @property
    def view_entries(self) -> List[ViewEntry]:
        return list(self.state.view.entries)

    @property
    def selected_id(self) -> Optional[str]:
        return self.state.view.selected_id

    @property
    def warning_count(self) -> int:
        """Unreadable directories from the last scan plus malformed lines."""
        parse_failures = sum(r.parse_failures for r in self.state.table.records())
        return len(self.state.scan_warnings) + parse_failures

    def selected_detail(self, now: Optional[datetime] = None) -> Optional[SessionDetail]:
        record = self.state.table.get(self.selected_id)
        if record is None:
            return None
        if now is None:
            now = datetime.now(timezone.utc)
        return SessionDetail(
            session_id=record.id,
            title=display_name(record),
            git_branch=record.branch,
            working_directory=record.cwd or _decoded_project_path(record),
            tokens_in=record.tokens_in,
            tokens_out=record.tokens_out,
            message_count=record.message_count(self.settings.count_progress_messages),
            is_active=is_active(record, now, self.settings.staleness_seconds),
            summary=record.summary,
            first_prompt=record.first_prompt,
            last_activity=record.last_activity,
            source_path=record.source_path,
        )

    def selected_messages(self) -> List[DisplayMessage]:
        record = self.state.table.get(self.selected_id)
        if record is None:
            return []
        return list(record.messages)

    def consume_scroll_to_bottom(self) -> bool:
        """Return True once after the selected chat should jump to its end."""
        pending = self.state.scroll_to_bottom_pending
        self.state.scroll_to_bottom_pending = False
        return pending


def run_headless(
    engine: MonitorEngine,
    should_stop: Callable[[], bool],
    tick_seconds: Optional[float] = None,
) -> None:
    """Start engine and tick it until should_stop() or a quit intent.

    WatchChannelError from a tick propagates after the engine is stopped.
    """
    if tick_seconds is None:
        tick_seconds = engine.settings.tick_interval

    engine.start()
    try:
        while not should_stop() and not engine.state.should_quit:
            engine.tick()
            time.sleep(tick_seconds)
    finally:
        engine.stop()
