"""Outcome wrapper for operations whose failures the dispatcher must see."""

from datetime import datetime, timezone
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ServiceError(BaseModel):
    """Structured, user-facing failure notice."""

    code: str = Field(..., description="Machine-readable error code, e.g. sync_failed")
    message: str = Field(..., description="Human-readable notice for the dispatcher")
    retryable: bool = False
    details: dict[str, str | int | float | bool | None] | None = None


class ServiceResult(BaseModel, Generic[T]):
    """On success ``data`` is populated, on failure ``error`` is."""

    success: bool
    data: T | None = None
    error: ServiceError | None = None
    duration_ms: float | None = Field(default=None, ge=0)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @classmethod
    def ok(cls, data: T, duration_ms: float | None = None) -> "ServiceResult[T]":
        return cls(success=True, data=data, duration_ms=duration_ms)

    @classmethod
    def fail(
        cls,
        code: str,
        message: str,
        retryable: bool = False,
        **details: str | int | float | bool | None,
    ) -> "ServiceResult[T]":
        return cls(
            success=False,
            error=ServiceError(
                code=code, message=message, retryable=retryable, details=details or None
            ),
        )
