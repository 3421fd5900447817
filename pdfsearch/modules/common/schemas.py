"""Schemas shared by every module."""

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class TimestampSchema(BaseModel):
    """Creation and last-update timestamps."""

    created_at: datetime
    updated_at: Optional[datetime] = None


class OperationResult(BaseModel, Generic[T]):
    """Envelope returned by every public operation.

    Either ``data`` (on success) or ``error`` (on failure) is populated;
    ``message`` is always a human-readable summary.
    """

    success: bool
    message: str
    data: Optional[T] = None
    error: Optional[str] = Field(default=None, description="Error detail when success is false")

    @classmethod
    def ok(cls, data: Optional[T] = None, message: str = "OK") -> "OperationResult[T]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def failure(cls, message: str, error: Optional[str] = None) -> "OperationResult[T]":
        return cls(success=False, message=message, error=error)
