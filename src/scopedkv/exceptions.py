"""Custom exception hierarchy for scopedkv."""

from __future__ import annotations


class KvsError(Exception):
    """Base exception for all scopedkv errors."""


class KvsConfigError(KvsError):
    """Invalid or missing configuration."""


class InvalidScopeError(KvsError):
    """Unknown scope tag or a scope identifier that is not a string."""


class ScopeIdRequiredError(KvsError):
    """A workflow or execution scope was addressed without an identifier.

    Raised synchronously by ``set``, ``get``, ``delete`` and ``clear`` (and
    by :class:`~scopedkv.state.scope.ScopeRef` construction) before any
    mapping is touched, so a failing call never mutates the store.
    """

    def __init__(self, message: str | None = None, *, scope: str = "") -> None:
        self.scope = scope
        if message is None:
            article = "an" if str(scope)[:1] in "aeiou" else "a"
            message = f"{str(scope).capitalize()} scope requires {article} {scope} ID"
        super().__init__(message)
