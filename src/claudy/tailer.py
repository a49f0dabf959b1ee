"""
Incremental tailing of append-only transcripts.

A record's byte_offset marks how much of its file has been consumed. Each
call reads only the bytes appended since then and consumes complete,
newline-terminated lines. A trailing partial line (the writer may still be
flushing) is left in place and picked up whole on a later call, so the
offset always sits on a line boundary.

Reading from offset 0 and reading across any number of append boundaries
produce the same record.
"""

from dataclasses import dataclass
from typing import List

from .line_interpreter import EntryKind, InterpretedLine, ParseFailure, interpret_line
from .logging_config import get_structured_logger
from .models import DisplayMessage, SessionRecord

log = get_structured_logger("tailer")

READ_CHUNK_SIZE = 1024 * 1024


@dataclass
class TailResult:
    """Outcome of one tailing pass over a record's file."""
    new_messages: List[DisplayMessage]
    lines_read: int = 0
    parse_failures: int = 0
    bytes_consumed: int = 0
    stalled: bool = False  # I/O error; retry next tick
    missing: bool = False  # file is gone

    @property
    def changed(self) -> bool:
        return self.bytes_consumed > 0


def apply_interpreted(record: SessionRecord, interpreted: InterpretedLine) -> None:
    """Apply one interpreted line to record, in file order."""
    meta = interpreted.metadata
    if meta is not None:
        if meta.slug:
            record.slug = meta.slug
        if meta.cwd:
            record.working_directory = meta.cwd
        if meta.git_branch:
            record.git_branch = meta.git_branch
        if meta.custom_title:
            record.inline_custom_title = meta.custom_title
        if meta.summary:
            record.inline_summary = meta.summary
        record.tokens_in += meta.tokens_in
        record.tokens_out += meta.tokens_out

    if interpreted.kind is EntryKind.PROGRESS:
        record.progress_count += 1

    if interpreted.message is not None:
        record.messages.append(interpreted.message)

    record.touch(interpreted.timestamp)


def consume_lines(record: SessionRecord, data: bytes, result: TailResult) -> int:
    """Feed the complete lines of data to record.

    Returns:
        Number of bytes consumed (up to and including the last newline)
    """
    end = data.rfind(b"\n")
    if end < 0:
        return 0

    for raw in data[:end].split(b"\n"):
        text = raw.decode("utf-8", errors="replace").strip()
        if not text:
            continue
        result.lines_read += 1
        try:
            interpreted = interpret_line(text)
        except ParseFailure as e:
            result.parse_failures += 1
            record.parse_failures += 1
            log.debug("Skipping malformed line", session_id=record.short_id, error=e)
            continue
        apply_interpreted(record, interpreted)
        if interpreted.message is not None:
            result.new_messages.append(interpreted.message)

    return end + 1


def tail_session(record: SessionRecord) -> TailResult:
    """Read and apply everything appended to record's file since byte_offset.

    Never raises for I/O problems: a vanished file sets record.missing, any
    other OSError marks the result stalled and leaves the offset untouched.
    A file shorter than the offset is treated as having no new data.
    """
    result = TailResult(new_messages=[])
    path = record.source_path
    slog = log.with_context(session_id=record.short_id)

    try:
        with open(path, "rb") as f:
            size = f.seek(0, 2)
            if size < record.byte_offset:
                slog.debug("File shrank; waiting for new data",
                           size=size, offset=record.byte_offset)
                record.missing = False
                return result
            if size == record.byte_offset:
                record.missing = False
                return result

            f.seek(record.byte_offset)
            pending = b""
            while True:
                chunk = f.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                pending += chunk
                consumed = consume_lines(record, pending, result)
                if consumed:
                    record.byte_offset += consumed
                    result.bytes_consumed += consumed
                    pending = pending[consumed:]
    except FileNotFoundError:
        record.missing = True
        result.missing = True
        slog.info("Transcript disappeared", path=path)
        return result
    except OSError as e:
        result.stalled = True
        slog.warning("Read failed, will retry", error=e)
        return result

    record.missing = False
    if result.parse_failures:
        slog.warning("Skipped malformed lines", count=result.parse_failures)
    return result
