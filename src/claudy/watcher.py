"""
Filesystem notification source.

A daemon thread runs watchfiles.watch() over the projects root and pushes
classified events into a bounded queue. The thread never touches session
state; the engine drains the queue from its own control thread on every
tick.

When the queue is full the event is dropped and an overflow flag is set.
The engine answers overflow with a full rescan, so no change is lost, only
coalesced.
"""

import queue
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from watchfiles import Change, watch

from .index_loader import is_index_file
from .logging_config import get_logger
from .scanner import is_session_file

logger = get_logger("watcher")

DEFAULT_MAX_QUEUE = 10_000
DEFAULT_DEBOUNCE_MS = 200
STOP_JOIN_TIMEOUT = 2.0


class WatchChannelError(RuntimeError):
    """The notification channel failed or could not be established."""


class WatchEventKind(Enum):
    FILE_MODIFIED = "modified"
    FILE_CREATED = "created"


@dataclass(frozen=True)
class WatchEvent:
    kind: WatchEventKind
    path: Path


def classify_change(change: Change, path: Path) -> Optional[WatchEvent]:
    """Map a raw watchfiles change to an event, or None if irrelevant.

    Only transcripts and index documents matter. Deletions are ignored;
    vanished transcripts are noticed by the tailer and the rescan.
    """
    if not (is_session_file(path) or is_index_file(path)):
        return None
    if change == Change.added:
        return WatchEvent(WatchEventKind.FILE_CREATED, path)
    if change == Change.modified:
        return WatchEvent(WatchEventKind.FILE_MODIFIED, path)
    return None


class SessionWatcher:
    """Watch a projects root in a background thread."""

    def __init__(
        self,
        root: Path,
        max_queue: int = DEFAULT_MAX_QUEUE,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ):
        self.root = Path(root)
        self.debounce_ms = debounce_ms
        self._queue: "queue.Queue[WatchEvent]" = queue.Queue(maxsize=max_queue)
        self._stop_event = threading.Event()
        self._overflow = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            logger.warning("Watcher already running for %s", self.root)
            return
        if not self.root.is_dir():
            raise WatchChannelError(f"cannot watch {self.root}: not a directory")

        self._stop_event.clear()
        self._error = None
        self._thread = threading.Thread(
            target=self._run, name="claudy-watcher", daemon=True
        )
        self._thread.start()
        logger.info("Watching %s", self.root)

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=STOP_JOIN_TIMEOUT)
            self._thread = None
        logger.info("Watcher stopped")

    def poll(self) -> List[WatchEvent]:
        """Drain queued events without blocking.

        Raises:
            WatchChannelError: the watch thread died
        """
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                break

        if self._error is not None:
            raise WatchChannelError(f"watch thread failed: {self._error}") from self._error
        if self._thread is not None and not self._thread.is_alive() and not self._stop_event.is_set():
            raise WatchChannelError("watch thread exited unexpectedly")
        return events

    def consume_overflow(self) -> bool:
        if self._overflow.is_set():
            self._overflow.clear()
            return True
        return False

    def enqueue(self, event: WatchEvent) -> bool:
        """Queue an event; on a full queue drop it and flag overflow."""
        try:
            self._queue.put_nowait(event)
            return True
        except queue.Full:
            if not self._overflow.is_set():
                logger.warning("Event queue full; falling back to a full rescan")
            self._overflow.set()
            return False

    def _accepts(self, change: Change, path: str) -> bool:
        return classify_change(change, Path(path)) is not None

    def _run(self) -> None:
        try:
            for changes in watch(
                self.root,
                watch_filter=self._accepts,
                debounce=self.debounce_ms,
                stop_event=self._stop_event,
                raise_interrupt=False,
                recursive=True,
            ):
                for change, raw_path in changes:
                    event = classify_change(change, Path(raw_path))
                    if event is not None:
                        self.enqueue(event)
        except Exception as e:
            logger.error("Watch thread failed: %s", e)
            self._error = e
