"""
TUI widget components for claudy.

Each widget renders one part of the engine's snapshot; none of them hold
session state of their own.
"""

from .chat_pane import ChatPane
from .info_panel import InfoPanel
from .session_list import SessionList
from .status_bar import StatusBar

__all__ = [
    "ChatPane",
    "InfoPanel",
    "SessionList",
    "StatusBar",
]
