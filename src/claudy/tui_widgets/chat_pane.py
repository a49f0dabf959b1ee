"""
Chat pane widget for TUI.

Shows the selected session's messages in file order. Uses
ScrollableContainer for native mouse wheel / trackpad scrolling.
Follows new messages at the bottom unless the user has scrolled up.
"""

from typing import List, Optional

from textual.containers import ScrollableContainer
from textual.message import Message
from textual.widgets import Static
from rich.text import Text

from ..models import DisplayMessage
from ..tui_formatters import format_clock, format_tokens, message_label, message_style


class ChatPane(ScrollableContainer):
    """Scrollable transcript of the selected session."""

    class FollowChanged(Message):
        """Posted when the user scrolls away from, or back to, the bottom."""
        def __init__(self, following: bool):
            super().__init__()
            self.following = following

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.session_id: Optional[str] = None
        self.rendered_count = 0
        self.following = True

    def compose(self):
        yield Static(id="chat-content")

    def _build_content(self, title: str, messages: List[DisplayMessage]) -> Text:
        content = Text()
        content.append(f"─── {title} ", style="bold cyan")
        content.append("\n")

        if not messages:
            content.append("(no messages)", style="dim italic")
            return content

        for message in messages:
            content.append(f"{format_clock(message.timestamp)} ", style="dim")
            content.append(message_label(message.kind), style=message_style(message.kind))
            if message.tokens_out:
                content.append(f"  ↓{format_tokens(message.tokens_out)}", style="dim")
            content.append("\n")
            content.append(message.content)
            content.append("\n\n")
        return content

    def needs_update(self, session_id: Optional[str], count: int) -> bool:
        return session_id != self.session_id or count != self.rendered_count

    def show_messages(
        self,
        session_id: Optional[str],
        title: str,
        messages: List[DisplayMessage],
        scroll_to_bottom: bool = False,
    ) -> None:
        """Replace the pane content, keeping the scroll position unless following."""
        switched = session_id != self.session_id
        self.session_id = session_id
        self.rendered_count = len(messages)

        saved_scroll = self.scroll_offset.y
        self.query_one("#chat-content", Static).update(self._build_content(title, messages))

        if scroll_to_bottom or (self.following and not switched):
            self.call_after_refresh(lambda: self.scroll_end(animate=False))
        elif switched:
            self.call_after_refresh(lambda: self.scroll_home(animate=False))
        else:
            self.call_after_refresh(lambda: self.scroll_to(y=saved_scroll, animate=False))

    def follow_bottom(self) -> None:
        self._set_following(True)
        self.scroll_end(animate=False)

    def _set_following(self, following: bool) -> None:
        if following != self.following:
            self.following = following
            self.post_message(self.FollowChanged(following))

    def on_mouse_scroll_up(self, event) -> None:
        """User scrolled up with mouse wheel: stop following."""
        self._set_following(False)

    def on_mouse_scroll_down(self, event) -> None:
        """User scrolled down: follow again once back at the bottom."""
        self.call_after_refresh(self._check_at_bottom)

    def _check_at_bottom(self) -> None:
        if self.max_scroll_y <= 0 or self.scroll_offset.y >= self.max_scroll_y - 1:
            self._set_following(True)
