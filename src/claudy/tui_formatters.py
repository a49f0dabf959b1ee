"""
Pure formatting functions for display.

These turn token counts, timestamps, and long strings into short labels for
the session list, info panel, and status bar. No session logic lives here.
"""

from datetime import datetime, timezone
from typing import Optional

from .models import MessageKind


def format_tokens(tokens: int) -> str:
    """Format token count to human readable (K/M).

    Args:
        tokens: Number of tokens

    Returns:
        Formatted string like "1.2K", "3.5M", or "500" for small counts
    """
    if tokens >= 1_000_000:
        return f"{tokens / 1_000_000:.1f}M"
    elif tokens >= 1_000:
        return f"{tokens / 1_000:.1f}K"
    else:
        return str(tokens)


def format_ago(dt: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Format datetime as time ago string.

    Args:
        dt: The datetime to format (timezone-aware)
        now: Reference time (defaults to UTC now)

    Returns:
        String like "30s ago", "5m ago", "2.5h ago", "3d ago", or "never"
    """
    if not dt:
        return "never"
    if now is None:
        now = datetime.now(timezone.utc)
    delta = max(0.0, (now - dt).total_seconds())
    if delta < 60:
        return f"{int(delta)}s ago"
    elif delta < 3600:
        return f"{int(delta // 60)}m ago"
    elif delta < 86400:
        return f"{delta / 3600:.1f}h ago"
    else:
        return f"{int(delta // 86400)}d ago"


def format_clock(dt: Optional[datetime]) -> str:
    """Local wall-clock time (HH:MM:SS) for chat message headers."""
    if not dt:
        return "--:--:--"
    return dt.astimezone().strftime("%H:%M:%S")


def truncate(text: str, max_len: int) -> str:
    """Cut text to max_len characters, marking the cut with an ellipsis."""
    if max_len <= 0:
        return ""
    if len(text) <= max_len:
        return text
    if max_len == 1:
        return "…"
    return text[: max_len - 1] + "…"


def first_line(text: str) -> str:
    return text.strip().split("\n", 1)[0] if text else ""


MESSAGE_LABELS = {
    MessageKind.USER: ("You", "bold cyan"),
    MessageKind.ASSISTANT: ("Claude", "bold green"),
    MessageKind.TOOL_USE: ("Tool", "bold yellow"),
    MessageKind.OTHER: ("·", "dim"),
}


def message_label(kind: MessageKind) -> str:
    return MESSAGE_LABELS[kind][0]


def message_style(kind: MessageKind) -> str:
    return MESSAGE_LABELS[kind][1]
