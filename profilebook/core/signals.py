"""
Cross-view notification signals.
Listeners register by event name and are called synchronously on emit.
"""

from typing import Any, Callable, Dict, List

from ..util.logging import logger

CONNECTIONS_UPDATED = "connections-updated"


class SignalBus:
    """Registry of listeners keyed by event name."""

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}

    def register(self, event: str, func: Callable) -> None:
        """Register a listener for an event."""
        if not callable(func):
            raise ValueError(f"Listener must be callable: {func}")

        self._listeners.setdefault(event, []).append(func)

    def unregister(self, event: str, func: Callable) -> None:
        """Remove a listener; unknown listeners are ignored."""
        listeners = self._listeners.get(event, [])
        if func in listeners:
            listeners.remove(func)

    def listeners(self, event: str) -> List[Callable]:
        return list(self._listeners.get(event, []))

    def emit(self, event: str, **payload: Any) -> int:
        """Call every listener for ``event``; returns how many were notified.

        A failing listener is logged and does not stop the others.
        """
        notified = 0
        for func in self.listeners(event):
            try:
                func(event, **payload)
                notified += 1
            except Exception as e:
                logger.warning(f"Listener for '{event}' failed: {e}")
        return notified

    def clear(self) -> None:
        self._listeners.clear()


# Process-wide bus shared by views
bus = SignalBus()
