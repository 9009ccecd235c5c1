"""Store configuration for scopedkv."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from scopedkv.exceptions import KvsConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[float] | type[int]) -> float | int:
    try:
        return cast(value.strip())
    except ValueError as exc:
        raise KvsConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class KvsConfig:
    """Store configuration.

    Parameters
    ----------
    default_ttl : float
        Time-to-live in seconds applied by ``set`` when the caller passes
        no ``ttl_seconds``.  Defaults to ``0`` (entries never expire).
        An explicit ``ttl_seconds=0`` always means no expiration,
        regardless of this setting.
    log_values : bool
        Include a truncated summary of written values in DEBUG logs.
        Values are opaque and may carry secrets, so this is off by default.
    max_logged_chars : int
        Maximum string length kept in value summaries when
        ``log_values`` is enabled.
    """

    default_ttl: float = 0.0
    log_values: bool = False
    max_logged_chars: int = 64

    def __post_init__(self) -> None:
        if self.default_ttl < 0:
            raise KvsConfigError(f"default_ttl must be >= 0, got {self.default_ttl}")
        if self.max_logged_chars <= 0:
            raise KvsConfigError(f"max_logged_chars must be > 0, got {self.max_logged_chars}")

    @classmethod
    def from_env(cls, **overrides: Any) -> KvsConfig:
        """Create configuration from environment variables.

        Reads ``SCOPEDKV_DEFAULT_TTL``, ``SCOPEDKV_LOG_VALUES`` and
        ``SCOPEDKV_MAX_LOGGED_CHARS``. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        KvsConfig
            Populated configuration.

        Raises
        ------
        KvsConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        ttl_env = env.get("SCOPEDKV_DEFAULT_TTL")
        if ttl_env is not None and "default_ttl" not in overrides:
            config_kwargs["default_ttl"] = _env_number("SCOPEDKV_DEFAULT_TTL", ttl_env, float)

        if "log_values" not in overrides:
            config_kwargs["log_values"] = _env_bool(env.get("SCOPEDKV_LOG_VALUES"), False)

        chars_env = env.get("SCOPEDKV_MAX_LOGGED_CHARS")
        if chars_env is not None and "max_logged_chars" not in overrides:
            config_kwargs["max_logged_chars"] = _env_number("SCOPEDKV_MAX_LOGGED_CHARS", chars_env, int)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
