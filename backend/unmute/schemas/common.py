"""
unMute Backend: Shared Response Schemas
========================================

Every route answers with one of two shapes:

    success:  {"status": "ok", "data": <payload>, "message": "..."?}
    failure:  {"status": "error", "error": "<message>", "details"?, "request_id"?}

`Envelope[T]` types the success shape so the OpenAPI docs show the payload
of each route; `ErrorResponse` documents the failure shape, which is built
by the exception handlers in main.py.
"""

from typing import Annotated, Generic, Literal, Optional, TypeVar

from fastapi import Path
from pydantic import BaseModel, Field

T = TypeVar("T")

# Largest value an INTEGER primary key column holds
MAX_ID = 2**31 - 1

# Path ids outside this range can never match a row; they fail validation
# instead of reaching the database driver
DbId = Annotated[int, Path(ge=1, le=MAX_ID)]


class Envelope(BaseModel, Generic[T]):
    status: Literal["ok"] = "ok"
    data: Optional[T] = None
    message: Optional[str] = Field(default=None, description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "status": "error",
            "error": "Email already registered",
            "details": {"field": "email"},
            "request_id": "1f0c2a9e"
        }
    """
    status: Literal["error"] = "error"
    error: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


# Shared by route decorators so every endpoint documents its error shape
ERROR_RESPONSES = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not allowed", "model": ErrorResponse},
    404: {"description": "Not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
