"""Periodic eviction of expired and exhausted actions."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from .policy import CleanupPredicate, should_evict
from .store import ActionStore

logger = logging.getLogger(__name__)


class Sweeper:
    """Scans the whole store and deletes records whose policy says evict.

    Scheduling is left to the caller; ``run`` does one full pass.
    """

    def __init__(
        self,
        store: ActionStore,
        clock: Callable[[], datetime],
        cleanup_predicate: Optional[CleanupPredicate] = None,
        batch_size: int = 500,
    ) -> None:
        self._store = store
        self._clock = clock
        self._cleanup_predicate = cleanup_predicate
        self._batch_size = batch_size

    def run(self) -> list[int]:
        """Do one pass and return the ids that were evicted."""
        now = self._clock()
        scanned = 0
        evicted: list[int] = []
        for record in self._store.iter_all(self._batch_size):
            scanned += 1
            if should_evict(record, now, self._cleanup_predicate):
                assert record.id is not None
                self._store.delete(record.id)
                evicted.append(record.id)
                logger.debug("Evicted action %s (%s)", record.id, record.name)
        logger.info("Sweep scanned %d actions, evicted %d", scanned, len(evicted))
        return evicted
