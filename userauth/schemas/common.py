"""
Common schema types used across the API.
"""

from typing import Any, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Failure reply in the fixed ``{status_code, message}`` shape."""

    status_code: int
    message: str
    errors: Optional[list[dict[str, Any]]] = None


class SuccessResponse(BaseModel):
    """Standard success response."""

    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
