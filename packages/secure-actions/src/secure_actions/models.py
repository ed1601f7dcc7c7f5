"""Data models for secure actions."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, Field, field_validator

# Values a handler argument may take. Lists nest arbitrarily.
ArgValue = Union[int, str, bool, list["ArgValue"]]

_ARG_KINDS = ("bool", "int", "str", "list")


class ActionStatus(Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"


def _tag(value: Any) -> dict[str, Any]:
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return {"bool": value}
    if isinstance(value, int):
        return {"int": value}
    if isinstance(value, str):
        return {"str": value}
    if isinstance(value, (list, tuple)):
        return {"list": [_tag(v) for v in value]}
    raise TypeError(
        f"Unsupported argument type {type(value).__name__}; "
        "expected int, str, bool or a list of those"
    )


def _untag(node: Any) -> ArgValue:
    if not isinstance(node, dict) or len(node) != 1:
        raise ValueError(f"Invalid argument node: {node!r}")
    kind, value = next(iter(node.items()))
    if kind not in _ARG_KINDS:
        raise ValueError(f"Unknown argument kind: {kind!r}")
    if kind == "bool" and isinstance(value, bool):
        return value
    if kind == "int" and isinstance(value, int) and not isinstance(value, bool):
        return value
    if kind == "str" and isinstance(value, str):
        return value
    if kind == "list" and isinstance(value, list):
        return [_untag(v) for v in value]
    raise ValueError(f"Argument kind {kind!r} does not match value {value!r}")


def normalize_args(args: Any) -> list[ArgValue]:
    """Validate an argument sequence, converting tuples to lists."""
    if not isinstance(args, (list, tuple)):
        raise TypeError(f"Arguments must be a list, got {type(args).__name__}")
    return [_untag(_tag(a)) for a in args]


def encode_args(args: list[ArgValue]) -> str:
    """Serialize arguments to their tagged JSON form."""
    return json.dumps([_tag(a) for a in args], separators=(",", ":"))


def decode_args(blob: str) -> list[ArgValue]:
    """Parse tagged JSON back into arguments.

    Only the four tagged kinds are ever constructed; anything else raises
    ``ValueError``.
    """
    nodes = json.loads(blob)
    if not isinstance(nodes, list):
        raise ValueError("Argument blob must be a JSON list")
    return [_untag(n) for n in nodes]


class ActionRecord(BaseModel):
    """A grantable action as persisted in the store.

    Only ``password_hash`` (via rotation) and ``count`` ever change after
    creation. The plaintext secret is never part of the record.
    """

    id: int | None = None
    password_hash: str
    name: str
    handler_id: str
    args: list[Any] = Field(default_factory=list)
    limit: int = Field(default=-1, ge=-1)
    count: int = Field(default=0, ge=0)
    expiration: int = Field(default=-1, ge=-1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    persistent: bool = False

    @field_validator("args", mode="before")
    @classmethod
    def _check_args(cls, value: Any) -> list[ArgValue]:
        return normalize_args(value)

    @field_validator("created_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def expires_at(self) -> datetime | None:
        if self.expiration == -1:
            return None
        return self.created_at + timedelta(seconds=self.expiration)
