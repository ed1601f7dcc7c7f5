"""Base class for action handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable


class ActionHandler(ABC):
    """Base class for action handlers.

    Records store only ``handler_id``; the live handler is looked up in the
    registry of a ``SecureActions`` instance at execution time.

    Subclasses must define:
    - `handler_id`: unique, stable identifier
    - `name`: human-readable name
    - `execute()`: perform the action

    The return value of ``execute`` decides whether the invocation counts:
    a truthy, non-exception result consumes one use, anything else leaves
    the counter untouched so the action can be retried.
    """

    handler_id: str
    name: str
    # Append the ActionRecord as the last positional argument
    pass_record: bool = False

    @abstractmethod
    def execute(self, *args: Any) -> Any:
        """Execute the action with the stored arguments. Return the result."""
        ...


class FunctionHandler(ActionHandler):
    """Wraps a plain function so it can be registered as a handler."""

    def __init__(
        self,
        handler_id: str,
        func: Callable[..., Any],
        name: str | None = None,
        pass_record: bool = False,
    ) -> None:
        self.handler_id = handler_id
        self.name = name or func.__name__
        self.pass_record = pass_record
        self._func = func

    def execute(self, *args: Any) -> Any:
        return self._func(*args)
