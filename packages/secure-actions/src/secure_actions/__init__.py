"""Secure actions — bearer tokens that run a registered handler a bounded number of times."""

from .config import Settings, get_settings
from .core import SecureActions
from .exceptions import (
    ActionExpiredError,
    ActionNotFoundError,
    ActionUnavailableError,
    DuplicateNameError,
    HandlerExecutionError,
    HandlerNotFoundError,
    InvalidKeyError,
    LimitExceededError,
    MalformedTokenError,
    SecureActionError,
    StoreError,
)
from .handler import ActionHandler, FunctionHandler
from .models import ActionRecord, ActionStatus
from .notifications import (
    ACTION_ADDED,
    ACTION_DELETED,
    ACTION_EXECUTED,
    ACTION_REJECTED,
    SWEEP_COMPLETED,
)
from .store import ActionStore
from .sweeper import Sweeper
from .tokens import decode_token, encode_token, parse_token, unwrap_token, wrap_token

__all__ = [
    "SecureActions",
    "Settings",
    "get_settings",
    "ActionHandler",
    "FunctionHandler",
    "ActionRecord",
    "ActionStatus",
    "ActionStore",
    "Sweeper",
    "encode_token",
    "decode_token",
    "parse_token",
    "wrap_token",
    "unwrap_token",
    "SecureActionError",
    "MalformedTokenError",
    "ActionNotFoundError",
    "InvalidKeyError",
    "ActionUnavailableError",
    "ActionExpiredError",
    "LimitExceededError",
    "DuplicateNameError",
    "StoreError",
    "HandlerNotFoundError",
    "HandlerExecutionError",
    "ACTION_ADDED",
    "ACTION_EXECUTED",
    "ACTION_REJECTED",
    "ACTION_DELETED",
    "SWEEP_COMPLETED",
]
