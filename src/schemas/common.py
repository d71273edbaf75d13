"""
Common schema types used across the API.
"""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard response envelope: success flag, message and optional payload."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class FieldError(BaseModel):
    """A single request validation problem."""

    field: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    """Failure envelope returned by the exception handlers."""

    success: bool = False
    message: str
    error_code: Optional[str] = None
    errors: Optional[List[FieldError]] = None
    request_id: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"
    cache: str = "connected"
