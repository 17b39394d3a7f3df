"""Common Pydantic schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="Path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    code: str = Field(..., description="Application-specific error code")
    retryable: bool = Field(False, description="Whether the operation can be retried")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")


# Documented error responses shared by the booking routes
PROBLEM_RESPONSES = {
    400: {"model": Problem, "description": "Validation or business rule failure"},
    401: {"model": Problem, "description": "X-User-ID header missing"},
    403: {"model": Problem, "description": "Booking belongs to another user"},
    404: {"model": Problem, "description": "Booking not found"},
}
