"""
View action methods for TUI.

Handles the active-only toggle, reloading, and chat following.
"""

from typing import TYPE_CHECKING

from textual.css.query import NoMatches

if TYPE_CHECKING:
    from ..tui_widgets import ChatPane


class ViewActionsMixin:
    """Mixin providing view/display actions for ClaudyTUI."""

    def action_toggle_active_only(self) -> None:
        """Toggle between all sessions and recently active ones."""
        active_only = self.engine.toggle_active_only()
        self.notify("Showing active sessions only" if active_only else "Showing all sessions",
                    timeout=2)
        self.refresh_view()

    def action_force_refresh(self) -> None:
        """Drop everything parsed so far and re-read all transcripts."""
        self.engine.force_refresh()
        self.notify("Reloaded all sessions", timeout=2)
        self.refresh_view()

    def action_follow_bottom(self) -> None:
        """Re-enable auto-follow and jump to the newest message."""
        from ..tui_widgets import ChatPane

        self.engine.set_auto_follow(True)
        try:
            self.query_one("#chat-pane", ChatPane).follow_bottom()
        except NoMatches:
            pass
        self.refresh_view()

    def on_chat_pane_follow_changed(self, message: "ChatPane.FollowChanged") -> None:
        self.engine.set_auto_follow(message.following)
        self.refresh_view()
