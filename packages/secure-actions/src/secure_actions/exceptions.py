"""Custom exceptions for secure actions."""


class SecureActionError(Exception):
    """Base exception for secure action errors."""

    code = "secure_action_error"


class MalformedTokenError(SecureActionError):
    """Raised when a presented token cannot be decoded."""

    code = "malformed_token"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Malformed token: {reason}")
        self.reason = reason


class ActionNotFoundError(SecureActionError):
    """Raised when an action does not exist (or was already purged)."""

    code = "not_found"

    def __init__(self, action: int | str) -> None:
        super().__init__(f"Action not found: {action}")
        self.action = action


class InvalidKeyError(SecureActionError):
    """Raised when the secret does not match the stored hash."""

    code = "invalid_key"

    def __init__(self, action_id: int) -> None:
        super().__init__(f"The key is invalid for action {action_id}")
        self.action_id = action_id


class ActionUnavailableError(SecureActionError):
    """A genuine token whose action can no longer be invoked.

    ``deleted`` tells whether the action was purged as a side effect of
    the rejected call.
    """

    def __init__(self, action_id: int, message: str, deleted: bool) -> None:
        super().__init__(message)
        self.action_id = action_id
        self.deleted = deleted


class ActionExpiredError(ActionUnavailableError):
    code = "expired"

    def __init__(self, action_id: int, deleted: bool = False) -> None:
        super().__init__(action_id, f"Action {action_id} expired", deleted)


class LimitExceededError(ActionUnavailableError):
    code = "limit_exceeded"

    def __init__(self, action_id: int, deleted: bool = False) -> None:
        super().__init__(
            action_id, f"Invocation limit of action {action_id} was exceeded", deleted
        )


class DuplicateNameError(SecureActionError):
    """Raised when an action name is already taken."""

    code = "duplicate_name"

    def __init__(self, name: str) -> None:
        super().__init__(f"Action name already exists: {name}")
        self.name = name


class StoreError(SecureActionError):
    """Raised when the backing store fails. The cause is chained."""

    code = "store_failure"


class HandlerNotFoundError(SecureActionError):
    """Raised when a handler is not registered."""

    code = "handler_not_found"

    def __init__(self, handler_id: str) -> None:
        super().__init__(f"Handler not found: {handler_id}")
        self.handler_id = handler_id


class HandlerExecutionError(SecureActionError):
    """Raised when a handler fails while executing an action."""

    code = "handler_failed"

    def __init__(self, handler_id: str, action_id: int, reason: str) -> None:
        super().__init__(f"Handler {handler_id} failed on action {action_id}: {reason}")
        self.handler_id = handler_id
        self.action_id = action_id
        self.reason = reason
