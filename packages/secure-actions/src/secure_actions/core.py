"""Core secure actions engine — the main entry point."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from .config import Settings, get_settings
from .credentials import generate_secret, hash_secret, verify_secret
from .exceptions import (
    ActionExpiredError,
    ActionNotFoundError,
    HandlerExecutionError,
    HandlerNotFoundError,
    InvalidKeyError,
    LimitExceededError,
    SecureActionError,
)
from .handler import ActionHandler, FunctionHandler
from .models import ActionRecord, ActionStatus, normalize_args
from .notifications import (
    ACTION_ADDED,
    ACTION_DELETED,
    ACTION_EXECUTED,
    ACTION_REJECTED,
    SWEEP_COMPLETED,
    EventBus,
)
from .policy import CleanupPredicate, is_invocable, status
from .store import ActionStore
from .sweeper import Sweeper
from .tokens import encode_token, parse_token

logger = logging.getLogger(__name__)

MayDeletePredicate = Callable[[ActionRecord], bool]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _may_delete(record: ActionRecord) -> bool:
    return not record.persistent


class SecureActions:
    """Mint, execute and evict bearer-token actions.

    Construct one instance per application and pass it to whatever needs
    it. Instances hold no state besides the store, the handler registry and
    the configured hooks, so several instances over the same database
    coordinate purely through the store.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        store: ActionStore | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = _utcnow,
        cleanup_predicate: Optional[CleanupPredicate] = None,
        may_delete_predicate: MayDeletePredicate = _may_delete,
    ) -> None:
        self.settings = settings or get_settings()
        if store is None:
            store = ActionStore(db_path if db_path is not None else self.settings.db_path)
        self._store = store
        self._clock = clock
        self._cleanup_predicate = cleanup_predicate
        self._may_delete = may_delete_predicate
        self._handlers: dict[str, ActionHandler] = {}
        self.events = EventBus()

    def close(self) -> None:
        """Close the backing store."""
        self._store.close()

    # ── Handler Registration ──

    def register_handler(self, handler: ActionHandler) -> None:
        """Register an action handler under its ``handler_id``."""
        self._handlers[handler.handler_id] = handler

    def handler(
        self, handler_id: str, *, pass_record: bool = False
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator registering a plain function as a handler."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register_handler(
                FunctionHandler(handler_id, func, pass_record=pass_record)
            )
            return func

        return decorator

    def get_handler(self, handler_id: str) -> ActionHandler:
        try:
            return self._handlers[handler_id]
        except KeyError:
            raise HandlerNotFoundError(handler_id)

    def list_handlers(self) -> list[ActionHandler]:
        return list(self._handlers.values())

    # ── Actions ──

    def add_action(
        self,
        name: str,
        handler_id: str,
        args: Iterable[Any] = (),
        expiration: int = -1,
        limit: int = -1,
        persistent: bool = False,
        secret: str | None = None,
    ) -> str:
        """Create an action and return its bearer token ``"<id>:<secret>"``.

        The secret is only ever returned here; the store keeps its hash.
        """
        self.get_handler(handler_id)
        if expiration < -1 or limit < -1:
            raise ValueError("expiration and limit must be -1 or non-negative")
        args = normalize_args(list(args))
        if not secret:
            secret = generate_secret(self.settings.secret_length)

        record = ActionRecord(
            password_hash=hash_secret(secret, self.settings.bcrypt_rounds),
            name=name,
            handler_id=handler_id,
            args=args,
            limit=limit,
            expiration=expiration,
            created_at=self._clock(),
            persistent=persistent,
        )
        record.id = self._store.create(record)
        logger.info("Added action %s (%s) for handler %s", record.id, name, handler_id)
        self.events.emit(ACTION_ADDED, action=record)
        return encode_token(record.id, secret)

    def execute_action(self, token: str) -> Any:
        """Verify ``token`` and run its handler. Returns the handler's result.

        A genuine token for an expired or exhausted action deletes the
        action (unless persistent) before the error is raised, so a late
        but otherwise valid request silently consumes the record.
        """
        try:
            return self._execute(token)
        except SecureActionError as exc:
            self.events.emit(ACTION_REJECTED, error=exc)
            raise

    def _execute(self, token: str) -> Any:
        action_id, secret = parse_token(token)
        record = self._store.get(action_id)
        if record is None:
            raise ActionNotFoundError(action_id)

        # Credential check comes before any policy check and never deletes
        if not verify_secret(secret, record.password_hash):
            logger.warning("Invalid key presented for action %s", action_id)
            raise InvalidKeyError(action_id)

        now = self._clock()
        if not is_invocable(record, now):
            deleted = False
            if not record.persistent:
                self._store.delete(action_id)
                deleted = True
                self.events.emit(ACTION_DELETED, action=record)
            state = status(record, now)
            logger.info("Action %s is %s (deleted=%s)", action_id, state.value, deleted)
            if state is ActionStatus.EXPIRED:
                raise ActionExpiredError(action_id, deleted=deleted)
            raise LimitExceededError(action_id, deleted=deleted)

        handler = self.get_handler(record.handler_id)
        args = list(record.args)
        if handler.pass_record:
            args.append(record)
        try:
            result = handler.execute(*args)
        except Exception as exc:
            logger.warning(
                "Handler %s failed on action %s", handler.handler_id, action_id, exc_info=True
            )
            raise HandlerExecutionError(handler.handler_id, action_id, str(exc)) from exc

        if not result or isinstance(result, Exception):
            logger.info("Handler %s reported no effect for action %s", handler.handler_id, action_id)
            return result

        strict = self.settings.strict_limits
        if not self._store.increment_count(action_id, conditional=strict):
            if strict and self._store.get(action_id) is not None:
                # Lost the race against a concurrent invocation
                logger.warning("Action %s hit its limit during execution", action_id)
                raise LimitExceededError(action_id, deleted=False)
            # Deleted underneath us; the invocation already happened
            logger.info("Action %s vanished before its count was recorded", action_id)

        logger.info("Executed action %s (%s)", action_id, record.name)
        self.events.emit(ACTION_EXECUTED, action=record, result=result)
        return result

    def _resolve(self, action: int | ActionRecord) -> ActionRecord:
        if isinstance(action, ActionRecord):
            if action.id is None:
                raise ActionNotFoundError(action.name)
            action = action.id
        return self.get_action(action)

    def get_action(self, action_id: int) -> ActionRecord:
        record = self._store.get(action_id)
        if record is None:
            raise ActionNotFoundError(action_id)
        return record

    def get_action_by_name(self, name: str) -> ActionRecord:
        record = self._store.get_by("name", name)
        if record is None:
            raise ActionNotFoundError(name)
        return record

    def delete_action(self, action: int | ActionRecord, *, force: bool = False) -> bool:
        """Delete an action, bypassing expiry and limit policy.

        Returns False without deleting when the may-delete predicate refuses
        (by default: persistent actions). ``force`` skips the predicate.
        """
        record = self._resolve(action)
        if not force and not self._may_delete(record):
            logger.info("Refused to delete action %s", record.id)
            return False
        assert record.id is not None
        self._store.delete(record.id)
        logger.info("Deleted action %s (%s)", record.id, record.name)
        self.events.emit(ACTION_DELETED, action=record)
        return True

    def replace_password(self, action: int | ActionRecord, secret: str | None = None) -> str:
        """Rotate the secret of an action and return the new token."""
        record = self._resolve(action)
        assert record.id is not None
        if not secret:
            secret = generate_secret(self.settings.secret_length)
        self._store.update(
            record.id, password_hash=hash_secret(secret, self.settings.bcrypt_rounds)
        )
        logger.info("Replaced secret of action %s", record.id)
        return encode_token(record.id, secret)

    # ── Eviction ──

    def sweep(self) -> int:
        """Evict every expired or exhausted, non-persistent action.

        Meant to be called by the host's scheduler, by default once every
        ``settings.sweep_interval_seconds``.
        """
        sweeper = Sweeper(
            self._store,
            self._clock,
            self._cleanup_predicate,
            batch_size=self.settings.sweep_batch_size,
        )
        evicted = sweeper.run()
        self.events.emit(SWEEP_COMPLETED, evicted=evicted)
        return len(evicted)
