"""SQLite persistence for secure actions."""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator

from .exceptions import ActionNotFoundError, DuplicateNameError, StoreError
from .models import ActionRecord, decode_args, encode_args

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS secure_actions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    password_hash TEXT NOT NULL,
    name TEXT NOT NULL UNIQUE,
    callback TEXT NOT NULL,
    args TEXT NOT NULL DEFAULT '[]',
    exec_limit INTEGER NOT NULL DEFAULT -1,
    exec_count INTEGER NOT NULL DEFAULT 0,
    expiration INTEGER NOT NULL DEFAULT -1,
    created_at TEXT NOT NULL,
    persistent INTEGER NOT NULL DEFAULT 0
);
"""

# Columns that get_by() may filter on
_LOOKUP_COLUMNS = {"id": "id", "name": "name", "handler_id": "callback"}

# Fields that may change after creation
_MUTABLE_COLUMNS = {"password_hash": "password_hash", "count": "exec_count"}


class ActionStore:
    """SQLite-backed repository for action records.

    One connection is shared between threads; statements are serialized by
    an internal lock that is only held for the duration of a single call.
    """

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        try:
            self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise StoreError(f"Could not open store at {db_path}: {exc}") from exc
        self._lock = threading.RLock()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            try:
                cur = self._conn.cursor()
                yield cur
                self._conn.commit()
            except sqlite3.Error as exc:
                self._rollback()
                raise StoreError(str(exc)) from exc

    def _rollback(self) -> None:
        try:
            self._conn.rollback()
        except sqlite3.Error:
            logger.exception("Rollback failed")

    # ── Create ──

    def create(self, record: ActionRecord) -> int:
        """Insert ``record`` and return its newly assigned id."""
        try:
            with self._cursor() as cur:
                cur.execute(
                    """INSERT INTO secure_actions
                       (password_hash, name, callback, args, exec_limit, exec_count,
                        expiration, created_at, persistent)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        record.password_hash,
                        record.name,
                        record.handler_id,
                        encode_args(record.args),
                        record.limit,
                        record.count,
                        record.expiration,
                        record.created_at.isoformat(),
                        int(record.persistent),
                    ),
                )
                action_id = cur.lastrowid
        except StoreError as exc:
            cause = exc.__cause__
            if isinstance(cause, sqlite3.IntegrityError) and "UNIQUE" in str(cause):
                raise DuplicateNameError(record.name) from cause
            raise
        assert action_id is not None
        return action_id

    # ── Read ──

    def get(self, action_id: int) -> ActionRecord | None:
        return self.get_by("id", action_id)

    def get_by(self, column: str, value: Any) -> ActionRecord | None:
        try:
            sql_column = _LOOKUP_COLUMNS[column]
        except KeyError:
            raise ValueError(f"Cannot look up actions by {column!r}")
        with self._cursor() as cur:
            row = cur.execute(
                f"SELECT * FROM secure_actions WHERE {sql_column} = ? ORDER BY id LIMIT 1",
                (value,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    def iter_all(self, batch_size: int = 500) -> Iterator[ActionRecord]:
        """Yield every record in id order, ``batch_size`` rows at a time.

        Rows deleted between batches are simply not seen.
        """
        last_id = -1
        while True:
            with self._cursor() as cur:
                rows = cur.execute(
                    "SELECT * FROM secure_actions WHERE id > ? ORDER BY id LIMIT ?",
                    (last_id, batch_size),
                ).fetchall()
            if not rows:
                return
            for row in rows:
                yield self._row_to_record(row)
            last_id = rows[-1]["id"]

    def count(self) -> int:
        with self._cursor() as cur:
            return cur.execute("SELECT COUNT(*) FROM secure_actions").fetchone()[0]

    # ── Update ──

    def update(self, action_id: int, **fields: Any) -> None:
        if not fields:
            return
        assignments = []
        values: list[Any] = []
        for field, value in fields.items():
            try:
                assignments.append(f"{_MUTABLE_COLUMNS[field]} = ?")
            except KeyError:
                raise ValueError(f"Field {field!r} cannot be updated")
            values.append(value)
        with self._cursor() as cur:
            cur.execute(
                f"UPDATE secure_actions SET {', '.join(assignments)} WHERE id = ?",
                (*values, action_id),
            )
            updated = cur.rowcount
        if updated == 0:
            raise ActionNotFoundError(action_id)

    def increment_count(self, action_id: int, *, conditional: bool = True) -> bool:
        """Add one to the invocation count in a single statement.

        With ``conditional`` the increment only happens while the count is
        below the limit. Returns whether a row was changed.
        """
        sql = "UPDATE secure_actions SET exec_count = exec_count + 1 WHERE id = ?"
        if conditional:
            sql += " AND (exec_limit = -1 OR exec_count < exec_limit)"
        with self._cursor() as cur:
            cur.execute(sql, (action_id,))
            return cur.rowcount == 1

    # ── Delete ──

    def delete(self, action_id: int) -> None:
        """Delete an action. Deleting a missing id is not an error."""
        with self._cursor() as cur:
            cur.execute("DELETE FROM secure_actions WHERE id = ?", (action_id,))

    def _row_to_record(self, row: sqlite3.Row) -> ActionRecord:
        try:
            return ActionRecord(
                id=row["id"],
                password_hash=row["password_hash"],
                name=row["name"],
                handler_id=row["callback"],
                args=decode_args(row["args"]),
                limit=row["exec_limit"],
                count=row["exec_count"],
                expiration=row["expiration"],
                created_at=datetime.fromisoformat(row["created_at"]),
                persistent=bool(row["persistent"]),
            )
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Action {row['id']} is corrupt: {exc}") from exc
