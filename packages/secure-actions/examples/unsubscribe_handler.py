"""Unsubscribe handler — a one-click link that removes an address from a list."""

from __future__ import annotations

from typing import Any

from secure_actions import ActionHandler, ActionRecord


class UnsubscribeHandler(ActionHandler):
    """Removes ``email`` from ``list_name``. Returns False if it wasn't subscribed."""

    handler_id = "newsletter.unsubscribe"
    name = "Unsubscribe"
    pass_record = True

    def __init__(self) -> None:
        self.subscribers: dict[str, set[str]] = {}

    def subscribe(self, list_name: str, email: str) -> None:
        self.subscribers.setdefault(list_name, set()).add(email)

    def execute(self, *args: Any) -> Any:
        list_name, email, record = args
        if not isinstance(record, ActionRecord):
            raise TypeError(f"expected the action record last, got {type(record).__name__}")
        members = self.subscribers.get(list_name, set())
        if email not in members:
            # Nothing happened, so the link stays usable
            return False
        members.discard(email)
        return {"unsubscribed": email, "list": list_name, "action": record.name}
