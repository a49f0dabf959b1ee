"""
Test fixtures and factories for claudy unit tests.

Builders for transcript lines, index documents, and project trees, plus a
scripted event source that stands in for the filesystem watcher.
"""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

from claudy.watcher import WatchChannelError, WatchEvent, WatchEventKind

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


def ts(minutes_ago: float = 0, base: datetime = NOW) -> str:
    """ISO-8601 UTC timestamp string, minutes_ago before base."""
    value = base - timedelta(minutes=minutes_ago)
    return value.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def at(minutes_ago: float = 0, base: datetime = NOW) -> datetime:
    """Aware datetime matching ts(minutes_ago) to the millisecond."""
    value = base - timedelta(minutes=minutes_ago)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def user_line(
    text="hello",
    timestamp: Optional[str] = None,
    slug: Optional[str] = None,
    cwd: Optional[str] = None,
    branch: Optional[str] = None,
    uuid: Optional[str] = None,
    parent_uuid: Optional[str] = None,
) -> dict:
    entry = {"type": "user", "message": {"role": "user", "content": text}}
    if timestamp is not None:
        entry["timestamp"] = timestamp
    if slug is not None:
        entry["slug"] = slug
    if cwd is not None:
        entry["cwd"] = cwd
    if branch is not None:
        entry["gitBranch"] = branch
    if uuid is not None:
        entry["uuid"] = uuid
    if parent_uuid is not None:
        entry["parentUuid"] = parent_uuid
    return entry


def assistant_line(
    text="ok",
    timestamp: Optional[str] = None,
    input_tokens: int = 0,
    output_tokens: int = 0,
    cache_read: int = 0,
    cache_creation: int = 0,
    tool: Optional[str] = None,
    usage: bool = True,
) -> dict:
    content = [{"type": "text", "text": text}] if text else []
    if tool is not None:
        content.append({"type": "tool_use", "id": "toolu_1", "name": tool, "input": {}})
    message = {"role": "assistant", "content": content}
    if usage:
        message["usage"] = {
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "cache_read_input_tokens": cache_read,
            "cache_creation_input_tokens": cache_creation,
        }
    entry = {"type": "assistant", "message": message}
    if timestamp is not None:
        entry["timestamp"] = timestamp
    return entry


def progress_line(timestamp: Optional[str] = None) -> dict:
    entry = {"type": "progress", "data": {"type": "hook_progress"}}
    if timestamp is not None:
        entry["timestamp"] = timestamp
    return entry


def custom_title_line(title: str) -> dict:
    return {"type": "custom-title", "customTitle": title}


def summary_line(summary: str) -> dict:
    return {"type": "summary", "summary": summary, "leafUuid": "leaf-1"}


def encode_lines(entries: List) -> str:
    """Serialize entries (dicts or raw strings) as newline-terminated lines."""
    lines = [e if isinstance(e, str) else json.dumps(e, ensure_ascii=False) for e in entries]
    return "".join(line + "\n" for line in lines)


def write_transcript(path: Path, entries: List, trailing: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(encode_lines(entries) + trailing, encoding="utf-8")
    return path


def append_raw(path: Path, text: str) -> None:
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)


def append_lines(path: Path, entries: List) -> None:
    append_raw(path, encode_lines(entries))


def write_index(project_dir: Path, entries: List[dict]) -> Path:
    project_dir.mkdir(parents=True, exist_ok=True)
    path = project_dir / "sessions-index.json"
    path.write_text(json.dumps({"version": 1, "entries": entries}))
    return path


def index_entry(
    session_id: str,
    custom_title: Optional[str] = None,
    summary: Optional[str] = None,
    modified: Optional[str] = None,
    **extra,
) -> dict:
    entry = {"sessionId": session_id, "isSidechain": False}
    if custom_title is not None:
        entry["customTitle"] = custom_title
    if summary is not None:
        entry["summary"] = summary
    if modified is not None:
        entry["modified"] = modified
    entry.update(extra)
    return entry


class FakeEventSource:
    """Scripted stand-in for SessionWatcher."""

    def __init__(self):
        self.pending: List[WatchEvent] = []
        self.overflow = False
        self.error: Optional[Exception] = None
        self.start_error: Optional[Exception] = None
        self.started = False
        self.stopped = False

    def start(self) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def poll(self) -> List[WatchEvent]:
        if self.error is not None:
            raise WatchChannelError(str(self.error))
        events, self.pending = self.pending, []
        return events

    def consume_overflow(self) -> bool:
        overflow, self.overflow = self.overflow, False
        return overflow

    def modified(self, path: Path) -> None:
        self.pending.append(WatchEvent(WatchEventKind.FILE_MODIFIED, path))

    def created(self, path: Path) -> None:
        self.pending.append(WatchEvent(WatchEventKind.FILE_CREATED, path))


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
