"""
Protocol definitions for the engine's external dependencies.

The engine only talks to the filesystem notification source through this
interface, so tests can drive it with a scripted in-memory source instead
of a real watcher thread.
"""

from typing import List, Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from .watcher import WatchEvent


@runtime_checkable
class EventSource(Protocol):
    """Interface for a filesystem change notification source"""

    def start(self) -> None:
        """Begin collecting events.

        Raises:
            WatchChannelError: the source cannot watch its root
        """
        ...

    def stop(self) -> None:
        """Stop collecting events and release resources."""
        ...

    def poll(self) -> List["WatchEvent"]:
        """Drain every queued event without blocking.

        Raises:
            WatchChannelError: the notification channel has failed
        """
        ...

    def consume_overflow(self) -> bool:
        """Return True once if events were dropped since the last call."""
        ...
