"""The result envelope every DragService operation returns to the CLI.

A move the rules reject is not a failure: the call succeeds and the
verdict travels in ``data``. ``ok=False`` is reserved for inputs the
service could not act on at all (missing files, unparseable scripts,
items that do not exist).
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class FailureCode(StrEnum):
    """Why a service call could not run."""

    SCRIPT_NOT_FOUND = "SCRIPT_NOT_FOUND"
    INVALID_SCRIPT = "INVALID_SCRIPT"
    BOARDS_NOT_FOUND = "BOARDS_NOT_FOUND"
    INVALID_BOARDS = "INVALID_BOARDS"
    UNKNOWN_ITEMS = "UNKNOWN_ITEMS"


class ServiceError(BaseModel):
    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service call.

    ``op`` names the call (``show``, ``preview``, ``replay``). ``meta``
    carries the telemetry span tree when ``--verbose`` is on.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def success(
        cls, op: str, data: dict[str, Any], warnings: list[str] | None = None
    ) -> ServiceResult:
        return cls(ok=True, op=op, data=data, warnings=warnings or [])

    @classmethod
    def failure(cls, op: str, code: FailureCode, message: str, **detail: Any) -> ServiceResult:
        error = ServiceError(code=str(code), message=message, detail=detail)
        return cls(ok=False, op=op, error=error)
