"""
Interpret one transcript line.

Each line of a session .jsonl is a JSON object with a "type". A line can
carry session metadata (slug, cwd, branch, title, summary, token usage), a
renderable chat message, both, or nothing:

    type            metadata                  message
    user            slug / cwd / gitBranch    User (Other for tool results)
    assistant       usage (accumulated)       Assistant, or ToolUse
    custom-title    customTitle               -
    summary         summary                   -
    progress        -                         - (kind still reported)
    anything else   -                         -

interpret_line() is a pure function. Malformed lines raise ParseFailure;
the caller skips them and keeps going.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .models import DisplayMessage, MessageKind, parse_iso_timestamp


class ParseFailure(ValueError):
    """A transcript line that is not a JSON object."""


class EntryKind(Enum):
    USER = "user"
    ASSISTANT = "assistant"
    CUSTOM_TITLE = "custom-title"
    SUMMARY = "summary"
    PROGRESS = "progress"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def classify(cls, type_string: Any) -> "EntryKind":
        """Map a raw "type" value to a kind; unknown values are UNRECOGNIZED."""
        if isinstance(type_string, str) and type_string != cls.UNRECOGNIZED.value:
            try:
                return cls(type_string)
            except ValueError:
                pass
        return cls.UNRECOGNIZED


@dataclass(frozen=True)
class MetadataUpdate:
    """Session metadata carried by one line. Token counts are deltas."""
    slug: Optional[str] = None
    cwd: Optional[str] = None
    git_branch: Optional[str] = None
    custom_title: Optional[str] = None
    summary: Optional[str] = None
    tokens_in: int = 0
    tokens_out: int = 0


@dataclass(frozen=True)
class InterpretedLine:
    kind: EntryKind
    metadata: Optional[MetadataUpdate] = None
    message: Optional[DisplayMessage] = None
    timestamp: Optional[datetime] = None


COMMAND_PLACEHOLDER = "[command]"
TOOL_RESULT_PLACEHOLDER = "[tool result]"


def _blocks(content: Any) -> List[dict]:
    if not isinstance(content, list):
        return []
    return [item for item in content if isinstance(item, dict)]


def has_tool_use(content: Any) -> bool:
    """True if a content array contains a tool_use block."""
    return any(block.get("type") == "tool_use" for block in _blocks(content))


def is_tool_result_only(content: Any) -> bool:
    """True if every block of a content array is a tool_result."""
    blocks = _blocks(content)
    return bool(blocks) and all(block.get("type") == "tool_result" for block in blocks)


def extract_text_content(content: Any) -> str:
    """Render message content to display text.

    Strings are trimmed; tag-wrapped strings show the text after the last
    closing tag, and slash-command wrappers collapse to "[command]". Arrays
    join their text blocks and render tool blocks as short references.
    """
    if isinstance(content, str):
        text = content.strip()
        if text.startswith("<") and ">" in text:
            after = text[text.rfind(">") + 1:].strip()
            if after:
                return after
            if "command-name" in text or "local-command" in text:
                return COMMAND_PLACEHOLDER
        return text

    parts = []
    for block in _blocks(content):
        block_type = block.get("type")
        if block_type == "text":
            text = block.get("text")
            if isinstance(text, str) and text.strip():
                parts.append(text.strip())
        elif block_type == "tool_use":
            name = block.get("name")
            parts.append(f"[tool: {name if isinstance(name, str) else 'unknown'}]")
        elif block_type == "tool_result":
            parts.append(TOOL_RESULT_PLACEHOLDER)
    return "\n".join(parts)


def _str_field(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    return value if isinstance(value, str) and value else None


def _int_field(data: dict, key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


def _message_body(data: dict) -> dict:
    body = data.get("message")
    return body if isinstance(body, dict) else {}


def _make_message(
    data: dict,
    kind: MessageKind,
    content: str,
    timestamp: Optional[datetime],
    tokens_in: Optional[int] = None,
    tokens_out: Optional[int] = None,
) -> Optional[DisplayMessage]:
    if not content or content == COMMAND_PLACEHOLDER:
        return None
    return DisplayMessage(
        kind=kind,
        timestamp=timestamp,
        content=content,
        tokens_in=tokens_in,
        tokens_out=tokens_out,
        uuid=_str_field(data, "uuid"),
        parent_uuid=_str_field(data, "parentUuid"),
    )


def _interpret_user(data: dict, timestamp: Optional[datetime]) -> InterpretedLine:
    metadata = MetadataUpdate(
        slug=_str_field(data, "slug"),
        cwd=_str_field(data, "cwd"),
        git_branch=_str_field(data, "gitBranch"),
    )
    content = _message_body(data).get("content")
    kind = MessageKind.OTHER if is_tool_result_only(content) else MessageKind.USER
    message = _make_message(data, kind, extract_text_content(content), timestamp)
    return InterpretedLine(EntryKind.USER, metadata, message, timestamp)


def _interpret_assistant(data: dict, timestamp: Optional[datetime]) -> InterpretedLine:
    body = _message_body(data)
    usage = body.get("usage")
    tokens_in: Optional[int] = None
    tokens_out: Optional[int] = None
    if isinstance(usage, dict):
        tokens_in = (
            _int_field(usage, "input_tokens")
            + _int_field(usage, "cache_read_input_tokens")
            + _int_field(usage, "cache_creation_input_tokens")
        )
        tokens_out = _int_field(usage, "output_tokens")

    metadata = MetadataUpdate(tokens_in=tokens_in or 0, tokens_out=tokens_out or 0)
    content = body.get("content")
    kind = MessageKind.TOOL_USE if has_tool_use(content) else MessageKind.ASSISTANT
    message = _make_message(
        data, kind, extract_text_content(content), timestamp, tokens_in, tokens_out
    )
    return InterpretedLine(EntryKind.ASSISTANT, metadata, message, timestamp)


def _interpret_custom_title(data: dict, timestamp: Optional[datetime]) -> InterpretedLine:
    title = _str_field(data, "customTitle")
    metadata = MetadataUpdate(custom_title=title) if title else None
    return InterpretedLine(EntryKind.CUSTOM_TITLE, metadata, None, timestamp)


def _interpret_summary(data: dict, timestamp: Optional[datetime]) -> InterpretedLine:
    summary = _str_field(data, "summary")
    metadata = MetadataUpdate(summary=summary) if summary else None
    return InterpretedLine(EntryKind.SUMMARY, metadata, None, timestamp)


def _interpret_progress(data: dict, timestamp: Optional[datetime]) -> InterpretedLine:
    return InterpretedLine(EntryKind.PROGRESS, None, None, timestamp)


def _interpret_unrecognized(data: dict, timestamp: Optional[datetime]) -> InterpretedLine:
    return InterpretedLine(EntryKind.UNRECOGNIZED)


_HANDLERS: Dict[EntryKind, Callable[[dict, Optional[datetime]], InterpretedLine]] = {
    EntryKind.USER: _interpret_user,
    EntryKind.ASSISTANT: _interpret_assistant,
    EntryKind.CUSTOM_TITLE: _interpret_custom_title,
    EntryKind.SUMMARY: _interpret_summary,
    EntryKind.PROGRESS: _interpret_progress,
    EntryKind.UNRECOGNIZED: _interpret_unrecognized,
}


def interpret_line(line: str) -> InterpretedLine:
    """Turn one raw transcript line into metadata and/or a display message.

    Args:
        line: One line of a .jsonl transcript, without the trailing newline

    Returns:
        InterpretedLine; metadata and message are None when the entry
        carries none

    Raises:
        ParseFailure: The line is not valid JSON or not a JSON object
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise ParseFailure(f"invalid JSON: {e.msg}") from e
    if not isinstance(data, dict):
        raise ParseFailure(f"expected a JSON object, got {type(data).__name__}")

    kind = EntryKind.classify(data.get("type"))
    timestamp = parse_iso_timestamp(data.get("timestamp"))
    return _HANDLERS[kind](data, timestamp)
