"""
TUI Action Mixins for claudy.

This package contains action method mixins organized by domain.
These are mixed into ClaudyTUI via multiple inheritance.
"""

from .navigation import NavigationActionsMixin
from .view import ViewActionsMixin
from .input import InputActionsMixin

__all__ = [
    "NavigationActionsMixin",
    "ViewActionsMixin",
    "InputActionsMixin",
]
