"""Common schemas for the Analytics Hub API."""

from typing import Any, Optional
from pydantic import BaseModel


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: ErrorBody


class SuccessResponse(BaseModel):
    """Standard success response."""
    message: str
    data: Optional[Any] = None
