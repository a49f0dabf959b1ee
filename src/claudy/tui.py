"""
Textual TUI for the claudy session monitor.

The app is a thin consumer of MonitorEngine: a timer calls engine.tick()
on Textual's own event loop, then the widgets are redrawn from the engine's
snapshot. Key bindings map to actions in the tui_actions mixins, which
translate them into engine intents.
"""

from datetime import datetime, timezone
from typing import Optional

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widgets import Header, Input

from . import __version__
from .engine import MonitorEngine
from .logging_config import get_logger
from .tui_actions import (
    InputActionsMixin,
    NavigationActionsMixin,
    ViewActionsMixin,
)
from .tui_widgets import ChatPane, InfoPanel, SessionList, StatusBar
from .watcher import WatchChannelError

logger = get_logger("tui")


class ClaudyTUI(
    NavigationActionsMixin,
    ViewActionsMixin,
    InputActionsMixin,
    App,
):
    """Live session monitor"""

    AUTO_FOCUS = None

    CSS = """
    #main {
        height: 1fr;
    }
    #session-list {
        width: 2fr;
        border: round $primary;
    }
    #right {
        width: 3fr;
    }
    #info-panel {
        height: auto;
        max-height: 12;
        border: round $secondary;
        padding: 0 1;
    }
    #chat-pane {
        height: 1fr;
        border: round $secondary;
        padding: 0 1;
    }
    #filter-input {
        dock: bottom;
        display: none;
    }
    #filter-input.visible {
        display: block;
    }
    #status-bar {
        dock: bottom;
        height: 1;
        background: $panel;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("j", "move_down", "Next"),
        ("down", "move_down", "Next"),
        ("k", "move_up", "Previous"),
        ("up", "move_up", "Previous"),
        ("a", "toggle_active_only", "Active only"),
        ("slash", "start_filter", "Filter"),
        ("escape", "clear_filter", "Clear filter"),
        ("r", "force_refresh", "Refresh"),
        ("G", "follow_bottom", "Follow"),
        ("g", "jump_top", "Top"),
    ]

    def __init__(self, engine: MonitorEngine, **kwargs):
        super().__init__(**kwargs)
        self.engine = engine
        self.fatal_error: Optional[Exception] = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="main"):
            yield SessionList(id="session-list")
            with Vertical(id="right"):
                yield InfoPanel(id="info-panel")
                yield ChatPane(id="chat-pane")
        yield Input(placeholder="filter sessions…", id="filter-input")
        yield StatusBar(id="status-bar")

    def on_mount(self) -> None:
        self.title = f"claudy v{__version__}"
        self.sub_title = str(self.engine.root)
        self.refresh_view()
        self.set_interval(self.engine.settings.tick_interval, self.tick)

    # ── Engine loop ───────────────────────────────────────────────────

    def tick(self) -> None:
        try:
            self.engine.tick()
        except WatchChannelError as e:
            logger.error("Watch channel failed: %s", e)
            self.fatal_error = e
            self.exit(return_code=1, message=f"File watching failed: {e}")
            return
        if self.engine.state.should_quit:
            self.exit()
            return
        self.refresh_view()

    def refresh_view(self) -> None:
        """Redraw every widget from the engine snapshot."""
        now = datetime.now(timezone.utc)
        engine = self.engine
        try:
            session_list = self.query_one("#session-list", SessionList)
            info = self.query_one("#info-panel", InfoPanel)
            chat = self.query_one("#chat-pane", ChatPane)
            status = self.query_one("#status-bar", StatusBar)
        except NoMatches:
            return

        view = engine.state.view
        session_list.update_entries(view.entries, view.selected_index, now)

        detail = engine.selected_detail(now)
        info.show_detail(detail, now)

        scroll = engine.consume_scroll_to_bottom()
        messages = engine.selected_messages()
        if scroll or chat.needs_update(engine.selected_id, len(messages)):
            title = detail.title if detail is not None else "no session"
            chat.show_messages(engine.selected_id, title, messages, scroll_to_bottom=scroll)

        status.update_status(
            visible=len(view.entries),
            total=len(engine.state.table),
            active_only=engine.state.filter.active_only,
            query=engine.state.filter.query,
            following=engine.state.auto_follow,
            warnings=engine.warning_count,
        )

    # ── Actions ───────────────────────────────────────────────────────

    def action_quit(self) -> None:
        self.engine.quit()
        self.exit()

