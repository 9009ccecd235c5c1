"""Scoped in-memory key-value store.

Data is partitioned into three independent top-level mappings, one per
:class:`~scopedkv.state.scope.Scope`. Workflow and execution data live in
per-identifier buckets underneath their mapping, so the same key string
never collides across partitions.

Expiration is lazy: an entry past its ``expire_at`` keeps occupying memory
until the next ``get`` for it (which purges it) or an explicit removal.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from scopedkv._redact import describe_for_log
from scopedkv.config import KvsConfig
from scopedkv.state.policy import compute_expire_at, effective_ttl, is_expired
from scopedkv.state.scope import ABSENT, Scope, ScopeRef

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StoreEntry(BaseModel):
    """A stored value plus its optional absolute expiry."""

    model_config = ConfigDict(frozen=True)

    value: Any
    expire_at: datetime | None = None


class ScopedStore:
    """In-memory store partitioned by global, workflow and execution scope.

    Build one per process at the composition root and hand it to whatever
    calls the operations. Each top-level scope mapping has its own lock;
    every operation holds exactly one of them for a single dictionary
    operation, so calls never block for long and never suspend.

    Parameters
    ----------
    config : KvsConfig or None
        Store configuration. Defaults to ``KvsConfig()``.
    clock : callable
        Returns the current time as an aware ``datetime``. Injected so
        expiry can be tested deterministically.
    """

    def __init__(
        self,
        config: KvsConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config or KvsConfig()
        self._clock = clock
        self._global: dict[str, StoreEntry] = {}
        self._workflows: dict[str, dict[str, StoreEntry]] = {}
        self._executions: dict[str, dict[str, StoreEntry]] = {}
        self._locks: dict[Scope, threading.RLock] = {scope: threading.RLock() for scope in Scope}

    @classmethod
    def from_env(cls, *, clock: Callable[[], datetime] = _utcnow, **overrides: Any) -> ScopedStore:
        """Build a store configured from ``SCOPEDKV_*`` environment variables."""
        return cls(KvsConfig.from_env(**overrides), clock=clock)

    @property
    def config(self) -> KvsConfig:
        return self._config

    # ------------------------------------------------------------------
    # External call shape: (scope, scope_id, ...)
    # ------------------------------------------------------------------

    def set(
        self,
        scope: Scope | str,
        scope_id: str | None,
        key: str,
        value: Any,
        ttl_seconds: float | None = None,
    ) -> None:
        """Store *value* under *key*, replacing any existing entry.

        A positive *ttl_seconds* makes the entry expire that many seconds
        from now; ``0`` means never. ``None`` applies the configured
        ``default_ttl``.
        """
        self._set(ScopeRef.resolve(scope, scope_id), key, value, ttl_seconds)

    def get(self, scope: Scope | str, scope_id: str | None, key: str, default: Any = ABSENT) -> Any:
        """Return the live value for *key*, or *default*.

        An expired entry is deleted by this call and reported as absent.
        """
        return self._get(ScopeRef.resolve(scope, scope_id), key, default)

    def delete(self, scope: Scope | str, scope_id: str | None, key: str) -> bool:
        """Remove *key*; ``True`` if an entry was physically stored.

        Expiry is not consulted: an expired entry nobody has read yet still
        counts as present.
        """
        return self._delete(ScopeRef.resolve(scope, scope_id), key)

    def clear(self, scope: Scope | str, scope_id: str | None) -> None:
        """Empty a scope. Workflow and execution buckets stay present but empty."""
        self._clear(ScopeRef.resolve(scope, scope_id))

    def cleanup_execution(self, execution_id: str) -> None:
        """Drop the whole bucket for *execution_id*; a no-op if it was never used."""
        with self._locks[Scope.EXECUTION]:
            bucket = self._executions.pop(execution_id, None)
        if bucket is not None:
            _logger.debug("Cleaned up execution %s (%d entries)", execution_id, len(bucket))

    def reset(self) -> None:
        """Replace every scope mapping with an empty one. Intended for tests."""
        with self._locks[Scope.GLOBAL], self._locks[Scope.WORKFLOW], self._locks[Scope.EXECUTION]:
            self._global = {}
            self._workflows = {}
            self._executions = {}
        _logger.debug("Store reset")

    def scoped(self, ref: ScopeRef) -> ScopeView:
        """Return a view whose operations are bound to *ref*."""
        return ScopeView(self, ref)

    # ------------------------------------------------------------------
    # Resolved operations
    # ------------------------------------------------------------------

    def _buckets(self, scope: Scope) -> dict[str, dict[str, StoreEntry]]:
        return self._workflows if scope is Scope.WORKFLOW else self._executions

    def _bucket(self, ref: ScopeRef, *, create: bool = False) -> dict[str, StoreEntry] | None:
        # Caller must hold the lock for ref.scope.
        if ref.scope is Scope.GLOBAL:
            return self._global
        assert ref.scope_id is not None  # noqa: S101
        buckets = self._buckets(ref.scope)
        bucket = buckets.get(ref.scope_id)
        if bucket is None and create:
            bucket = {}
            buckets[ref.scope_id] = bucket
            _logger.debug("Created bucket %s", ref)
        return bucket

    def _set(self, ref: ScopeRef, key: str, value: Any, ttl_seconds: float | None) -> None:
        ttl = effective_ttl(ttl_seconds, self._config.default_ttl)
        entry = StoreEntry(value=value, expire_at=compute_expire_at(self._clock(), ttl))
        with self._locks[ref.scope]:
            bucket = self._bucket(ref, create=True)
            assert bucket is not None  # noqa: S101
            bucket[key] = entry

        if self._config.log_values and _logger.isEnabledFor(logging.DEBUG):
            _logger.debug(
                "Set %r in %s (expire_at=%s): %s",
                key,
                ref,
                entry.expire_at,
                describe_for_log(value, max_string=self._config.max_logged_chars),
            )
        else:
            _logger.debug("Set %r in %s (expire_at=%s)", key, ref, entry.expire_at)

    def _get(self, ref: ScopeRef, key: str, default: Any) -> Any:
        with self._locks[ref.scope]:
            bucket = self._bucket(ref)
            entry = bucket.get(key) if bucket is not None else None
            if entry is None:
                return default
            if is_expired(self._clock(), entry.expire_at):
                assert bucket is not None  # noqa: S101
                del bucket[key]
                _logger.debug("Purged expired %r from %s (expired at %s)", key, ref, entry.expire_at)
                return default
            return entry.value

    def _delete(self, ref: ScopeRef, key: str) -> bool:
        with self._locks[ref.scope]:
            bucket = self._bucket(ref)
            if bucket is None or key not in bucket:
                return False
            del bucket[key]
            return True

    def _clear(self, ref: ScopeRef) -> None:
        with self._locks[ref.scope]:
            if ref.scope is Scope.GLOBAL:
                self._global = {}
            else:
                assert ref.scope_id is not None  # noqa: S101
                self._buckets(ref.scope)[ref.scope_id] = {}
        _logger.debug("Cleared %s", ref)


class ScopeView:
    """Store operations bound to one already-validated scope.

    Holds no data of its own; every call goes straight to the store.
    """

    __slots__ = ("_store", "ref")

    def __init__(self, store: ScopedStore, ref: ScopeRef) -> None:
        self._store = store
        self.ref = ref

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        self._store._set(self.ref, key, value, ttl_seconds)

    def get(self, key: str, default: Any = ABSENT) -> Any:
        return self._store._get(self.ref, key, default)

    def delete(self, key: str) -> bool:
        return self._store._delete(self.ref, key)

    def clear(self) -> None:
        self._store._clear(self.ref)

    def __repr__(self) -> str:
        return f"ScopeView({self.ref})"
