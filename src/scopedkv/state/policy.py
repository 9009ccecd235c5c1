"""Deterministic expiration policy.

Pure functions only: the store decides *when* to ask, this module decides
what a TTL means and whether an entry is still live.
"""

from __future__ import annotations

from datetime import datetime, timedelta


def effective_ttl(ttl_seconds: float | None, default_ttl: float) -> float:
    """The TTL ``set`` should apply; ``None`` falls back to the configured default."""
    if ttl_seconds is None:
        return default_ttl
    return float(ttl_seconds)


def compute_expire_at(now: datetime, ttl_seconds: float | None) -> datetime | None:
    """Absolute expiry for a write at *now*.

    Only a strictly positive TTL expires; ``None``, ``0``, negative and NaN
    values all mean the entry lives until removed. A TTL too large for
    ``datetime`` (including ``inf``) is clamped to ``datetime.max``.
    """
    if ttl_seconds is None or not ttl_seconds > 0:
        return None
    try:
        return now + timedelta(seconds=ttl_seconds)
    except OverflowError:
        return datetime.max.replace(tzinfo=now.tzinfo)


def is_expired(now: datetime, expire_at: datetime | None) -> bool:
    # An entry is still live at exactly its expiry instant.
    if expire_at is None:
        return False
    return expire_at < now
