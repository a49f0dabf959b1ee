"""
Navigation action methods for TUI.

Handles moving the selection through the session list.
"""


class NavigationActionsMixin:
    """Mixin providing navigation actions for ClaudyTUI."""

    def action_move_down(self) -> None:
        """Select the next session, stopping at the last one."""
        if self.engine.move_selection(1):
            self.refresh_view()

    def action_move_up(self) -> None:
        """Select the previous session, stopping at the first one."""
        if self.engine.move_selection(-1):
            self.refresh_view()

    def action_jump_top(self) -> None:
        if self.engine.select_index(0):
            self.refresh_view()
