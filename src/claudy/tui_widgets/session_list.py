"""
Session list widget for TUI.

One row per canonical session, most recently active first, with the
selected row highlighted.
"""

from datetime import datetime
from typing import List, Optional

from textual.containers import ScrollableContainer
from textual.widgets import Static
from rich.text import Text

from ..models import ViewEntry
from ..tui_formatters import format_ago, format_tokens, truncate

NAME_WIDTH = 36


def render_session_row(entry: ViewEntry, selected: bool, now: Optional[datetime] = None) -> Text:
    """Render one list row: marker, activity dot, name, counts, age."""
    row = Text()
    row.append("▶ " if selected else "  ", style="bold cyan")
    if entry.is_active:
        row.append("● ", style="bold green")
    else:
        row.append("○ ", style="dim")
    row.append(truncate(entry.display_name, NAME_WIDTH).ljust(NAME_WIDTH),
               style="bold" if selected else "")
    row.append(f" {entry.message_count:>5} msg", style="cyan")
    row.append(f" {format_tokens(entry.tokens_in + entry.tokens_out):>7} tok", style="magenta")
    row.append(f"  {format_ago(entry.last_activity, now)}", style="dim")
    if selected:
        row.stylize("reverse")
    return row


class SessionList(ScrollableContainer):
    """List of sessions in view order."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.entries: List[ViewEntry] = []
        self.selected_index: Optional[int] = None

    def compose(self):
        yield Static(id="session-rows")

    def update_entries(
        self,
        entries: List[ViewEntry],
        selected_index: Optional[int],
        now: Optional[datetime] = None,
    ) -> None:
        self.entries = entries
        self.selected_index = selected_index

        content = Text()
        if not entries:
            content.append("(no sessions)", style="dim italic")
        for i, entry in enumerate(entries):
            if i:
                content.append("\n")
            content.append(render_session_row(entry, i == selected_index, now))

        self.query_one("#session-rows", Static).update(content)
        if selected_index is not None:
            self.call_after_refresh(self._scroll_to_selected)

    def _scroll_to_selected(self) -> None:
        if self.selected_index is None:
            return
        top = self.scroll_offset.y
        height = max(1, self.size.height)
        if self.selected_index < top:
            self.scroll_to(y=self.selected_index, animate=False)
        elif self.selected_index >= top + height:
            self.scroll_to(y=self.selected_index - height + 1, animate=False)
