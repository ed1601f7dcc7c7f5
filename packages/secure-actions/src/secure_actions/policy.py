"""Invocation policy: expiry, limits and eviction."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from .models import ActionRecord, ActionStatus

CleanupPredicate = Callable[[ActionRecord], bool]


def is_expired(record: ActionRecord, now: datetime) -> bool:
    """True once ``now`` is strictly past ``created_at + expiration``.

    Expiry is only ever observed lazily; nothing fires when the deadline
    passes.
    """
    deadline = record.expires_at
    if deadline is None:
        return False
    return now > deadline


def is_limit_reached(record: ActionRecord) -> bool:
    if record.limit == -1:
        return False
    return record.count >= record.limit


def is_invocable(record: ActionRecord, now: datetime) -> bool:
    return not is_expired(record, now) and not is_limit_reached(record)


def should_evict(
    record: ActionRecord,
    now: datetime,
    cleanup_predicate: Optional[CleanupPredicate] = None,
) -> bool:
    """Whether the sweeper may remove ``record``.

    Persistent records are never evicted, not even by ``cleanup_predicate``.
    """
    if record.persistent:
        return False
    if is_expired(record, now) or is_limit_reached(record):
        return True
    if cleanup_predicate is not None:
        return bool(cleanup_predicate(record))
    return False


def status(record: ActionRecord, now: datetime) -> ActionStatus:
    if is_expired(record, now):
        return ActionStatus.EXPIRED
    if is_limit_reached(record):
        return ActionStatus.EXHAUSTED
    return ActionStatus.ACTIVE
