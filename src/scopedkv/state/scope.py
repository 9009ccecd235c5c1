"""Scope tags and validated scope references.

Every store operation resolves its ``(scope, scope_id)`` pair into a
:class:`ScopeRef` before touching any mapping. Workflow and execution refs
cannot exist without an identifier.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from scopedkv.exceptions import InvalidScopeError, ScopeIdRequiredError


class Scope(StrEnum):
    GLOBAL = "instance"
    WORKFLOW = "workflow"
    EXECUTION = "execution"

    @classmethod
    def _missing_(cls, value: object) -> Scope | None:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "global":
                return cls.GLOBAL
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class _Absent:
    """Marker returned by ``get`` when a key has no live entry and no default was given."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent()


def _is_missing(scope_id: str | None) -> bool:
    return scope_id is None or scope_id == ""


class ScopeRef(BaseModel):
    """A single storage partition: Global, Workflow(id) or Execution(id)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    scope: Scope
    scope_id: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _check_scope_id(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        scope = Scope(data.get("scope"))
        if scope is Scope.GLOBAL:
            # Global has no identifier; whatever the caller derived is ignored.
            return {**data, "scope": scope, "scope_id": None}
        if _is_missing(data.get("scope_id")):
            raise ScopeIdRequiredError(scope=scope)
        return {**data, "scope": scope}

    @classmethod
    def resolve(cls, scope: Scope | str, scope_id: str | None = None) -> ScopeRef:
        """Build a ref from the external ``(scope, scope_id)`` call shape.

        Raises :class:`~scopedkv.exceptions.ScopeIdRequiredError` when *scope*
        is workflow or execution and *scope_id* is ``None`` or empty, and
        :class:`~scopedkv.exceptions.InvalidScopeError` for an unknown tag or
        a non-string identifier.
        """
        try:
            return cls(scope=scope, scope_id=scope_id)
        except ValidationError as exc:
            raise InvalidScopeError(f"Invalid scope {scope!r} with id {scope_id!r}: {exc}") from exc

    @classmethod
    def global_(cls) -> ScopeRef:
        return cls.resolve(Scope.GLOBAL)

    @classmethod
    def workflow(cls, workflow_id: str) -> ScopeRef:
        return cls.resolve(Scope.WORKFLOW, workflow_id)

    @classmethod
    def execution(cls, execution_id: str) -> ScopeRef:
        return cls.resolve(Scope.EXECUTION, execution_id)

    def __str__(self) -> str:
        if self.scope_id is None:
            return str(self.scope)
        return f"{self.scope}:{self.scope_id}"
