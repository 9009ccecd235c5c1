"""Helpers for safe debug logging.

Stored values are opaque to the store and frequently carry caller data
that should not end up verbatim in logs. This module turns a value into a
short, bounded description suitable for DEBUG output.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


def describe_for_log(value: Any, *, max_string: int = 64, _depth: int = 0) -> str:
    """Return a bounded, human-readable summary of *value*."""
    if value is None:
        return "None"

    if isinstance(value, bool | int | float):
        return repr(value)

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]!r}…<truncated:{len(value)}>"
        return repr(value)

    if isinstance(value, bytes | bytearray):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        if _depth > 0:
            return f"<{type(value).__name__}:{len(value)} keys>"
        keys = ", ".join(describe_for_log(str(k), max_string=max_string, _depth=1) for k in list(value)[:5])
        more = ", …" if len(value) > 5 else ""
        return f"<{type(value).__name__}:{len(value)} keys [{keys}{more}]>"

    if isinstance(value, Sequence):
        return f"<{type(value).__name__}:{len(value)} items>"

    # Fallback: name the type without dumping internals.
    return f"<{type(value).__name__}>"
