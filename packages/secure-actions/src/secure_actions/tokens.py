"""Bearer token codec.

A token is ``"<id>:<secret>"``. For embedding in URLs it is additionally
wrapped in unpadded URL-safe base64. ``:`` is not part of that alphabet, so
a raw token can always be told apart from a wrapped one.
"""

from __future__ import annotations

import base64
import binascii
import re

from .exceptions import MalformedTokenError

SEPARATOR = ":"

_ID_RE = re.compile(r"[0-9]+")

# Largest id a SQLite INTEGER column can hold
MAX_ACTION_ID = 2**63 - 1


def encode_token(action_id: int, secret: str) -> str:
    if action_id < 0:
        raise ValueError("Action ids are non-negative")
    return f"{action_id}{SEPARATOR}{secret}"


def decode_token(token: str) -> tuple[int, str]:
    """Split a raw token into ``(action_id, secret)``."""
    action_id, sep, secret = token.partition(SEPARATOR)
    if not sep:
        raise MalformedTokenError("missing separator")
    if not _ID_RE.fullmatch(action_id):
        raise MalformedTokenError("id is not a non-negative integer")
    if not secret:
        raise MalformedTokenError("empty secret")
    digits = action_id.lstrip("0") or "0"
    # Length check first: int() refuses very long digit strings
    if len(digits) > len(str(MAX_ACTION_ID)) or int(digits) > MAX_ACTION_ID:
        raise MalformedTokenError("id out of range")
    return int(digits), secret


def wrap_token(token: str) -> str:
    return base64.urlsafe_b64encode(token.encode("utf-8")).decode("ascii").rstrip("=")


def unwrap_token(wrapped: str) -> str:
    padded = wrapped + "=" * (-len(wrapped) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise MalformedTokenError("invalid base64 wrapping") from exc


def parse_token(token: str) -> tuple[int, str]:
    """Decode a raw or base64-wrapped token."""
    if not token:
        raise MalformedTokenError("empty token")
    if SEPARATOR not in token:
        token = unwrap_token(token)
    return decode_token(token)
