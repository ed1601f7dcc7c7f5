"""Simple event/callback notification system."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable

EventCallback = Callable[..., None]


class EventBus:
    """Simple synchronous event bus with named events."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[EventCallback]] = defaultdict(list)

    def on(self, event: str, callback: EventCallback) -> None:
        """Register a listener for an event."""
        self._listeners[event].append(callback)

    def off(self, event: str, callback: EventCallback) -> None:
        """Remove a listener."""
        if callback in self._listeners.get(event, []):
            self._listeners[event].remove(callback)

    def emit(self, event: str, **kwargs: Any) -> None:
        """Emit an event, calling all registered listeners."""
        for callback in list(self._listeners.get(event, [])):
            callback(**kwargs)


# Standard event names
ACTION_ADDED = "action_added"
ACTION_EXECUTED = "action_executed"
ACTION_REJECTED = "action_rejected"
ACTION_DELETED = "action_deleted"
SWEEP_COMPLETED = "sweep_completed"
