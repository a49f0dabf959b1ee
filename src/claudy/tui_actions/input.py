"""
Input action methods for TUI.

Handles the session filter bar.
"""

from textual.widgets import Input


class InputActionsMixin:
    """Mixin providing filter input actions for ClaudyTUI."""

    def action_start_filter(self) -> None:
        """Show the filter bar, seeded with the current query."""
        filter_input = self.query_one("#filter-input", Input)
        filter_input.add_class("visible")
        filter_input.value = self.engine.state.filter.query
        filter_input.focus()

    def action_clear_filter(self) -> None:
        """Hide the filter bar and show every session again."""
        filter_input = self.query_one("#filter-input", Input)
        filter_input.remove_class("visible")
        filter_input.value = ""
        self.set_focus(None)
        self.engine.set_filter("")
        self.refresh_view()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "filter-input":
            self.engine.set_filter(event.value)
            self.refresh_view()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        # An empty submit closes the bar, otherwise the filter stays applied
        if event.input.id == "filter-input":
            if not event.value:
                event.input.remove_class("visible")
            self.set_focus(None)
