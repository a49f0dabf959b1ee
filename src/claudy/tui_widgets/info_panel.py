"""
Info panel widget for TUI.

Shows metadata of the selected session.
"""

from datetime import datetime
from typing import Optional

from textual.widgets import Static
from rich.text import Text

from ..models import SessionDetail
from ..tui_formatters import first_line, format_ago, format_tokens, truncate

FIELD_WIDTH = 10
PROMPT_WIDTH = 120


def render_detail(detail: Optional[SessionDetail], now: Optional[datetime] = None) -> Text:
    t = Text()
    if detail is None:
        t.append("No session selected", style="dim italic")
        return t

    def row(label: str, value: str, style: str = "white") -> None:
        t.append(f"{label:<{FIELD_WIDTH}}", style="bold bright_white")
        t.append(f"{value}\n", style=style)

    t.append(f"{detail.title}\n", style="bold cyan")
    row("Session", detail.session_id, "dim")
    row("Status", "active" if detail.is_active else "idle",
        "bold green" if detail.is_active else "dim")
    row("Last", format_ago(detail.last_activity, now))
    if detail.git_branch:
        row("Branch", detail.git_branch, "yellow")
    if detail.working_directory:
        row("Cwd", detail.working_directory)
    row("Messages", str(detail.message_count))
    row("Tokens", f"{format_tokens(detail.tokens_in)} in / {format_tokens(detail.tokens_out)} out")
    if detail.summary:
        row("Summary", detail.summary)
    if detail.first_prompt:
        row("Prompt", truncate(first_line(detail.first_prompt), PROMPT_WIDTH), "italic")
    return t


class InfoPanel(Static):
    """Selected session metadata"""

    def show_detail(self, detail: Optional[SessionDetail], now: Optional[datetime] = None) -> None:
        self.update(render_detail(detail, now))
