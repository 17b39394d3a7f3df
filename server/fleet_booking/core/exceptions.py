"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://fleet-booking.example.com/problems"


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    Every subclass carries a stable ``code`` so that clients can branch on the
    failure kind instead of matching on the human-readable detail.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        code: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        retryable: bool = False,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            code: Application-specific error code
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            retryable: Whether repeating the request may succeed
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.code = code
        self.detail = detail
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.retryable = retryable
        self.extensions = extensions or {}

        # Create the problem details object
        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
            "code": self.code,
            "retryable": self.retryable,
        }

        if self.detail:
            self.problem_details["detail"] = self.detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        # Add extensions
        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )
        # HTTPException stores the problem dict as detail; keep the message instead
        self.detail = detail


class ValidationError(ProblemDetailsException):
    """Exception for malformed input."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        violations: Optional[list[Dict[str, str]]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if violations:
            extensions["violations"] = violations

        super().__init__(
            status_code=400,
            title="Validation Error",
            code="VALIDATION_ERROR",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/validation-error",
            instance=instance,
            extensions=extensions,
        )


class AuthenticationError(ProblemDetailsException):
    """Exception raised when the acting user cannot be identified."""

    def __init__(
        self,
        detail: str = "X-User-ID header is required",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=401,
            title="User Identification Required",
            code="USER_ID_REQUIRED",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/user-id-required",
            instance=instance,
        )


class UnauthorizedError(ProblemDetailsException):
    """Exception raised when the acting user does not own the booking."""

    def __init__(
        self,
        booking_id: str,
        user_id: str,
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=403,
            title="Not Booking Owner",
            code="NOT_OWNER",
            detail=f"Booking '{booking_id}' does not belong to user '{user_id}'",
            type_uri=f"{PROBLEM_BASE_URI}/not-owner",
            instance=instance,
            extensions={"booking_id": booking_id},
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {
            "resource_type": resource_type,
        }
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            code="NOT_FOUND",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


# Business logic exceptions

class InvalidTransitionError(ProblemDetailsException):
    """Exception when a booking cannot move to the requested status."""

    def __init__(
        self,
        booking_id: str,
        current_status: str,
        target_status: str,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=400,
            title="Invalid Status Transition",
            code="INVALID_TRANSITION",
            detail=detail or f"Cannot move booking '{booking_id}' from '{current_status}' to '{target_status}'",
            type_uri=f"{PROBLEM_BASE_URI}/invalid-transition",
            instance=instance,
            extensions={
                "booking_id": booking_id,
                "current_status": current_status,
                "target_status": target_status,
            },
        )


class TooEarlyError(ProblemDetailsException):
    """Exception when a booking is started before its scheduled time."""

    def __init__(
        self,
        booking_id: str,
        start_time: datetime,
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=400,
            title="Booking Not Started Yet",
            code="TOO_EARLY",
            detail=f"Booking '{booking_id}' cannot be started before {start_time.isoformat()}",
            type_uri=f"{PROBLEM_BASE_URI}/too-early",
            instance=instance,
            retryable=True,
            extensions={
                "booking_id": booking_id,
                "start_time": start_time.isoformat(),
            },
        )


class InvalidUserError(ProblemDetailsException):
    """Exception when the user service rejects the booking user."""

    def __init__(
        self,
        user_id: str,
        reason: str = "user does not exist or is not active",
        retryable: bool = False,
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=400,
            title="Invalid User",
            code="INVALID_USER",
            detail=f"Invalid user '{user_id}': {reason}",
            type_uri=f"{PROBLEM_BASE_URI}/invalid-user",
            instance=instance,
            retryable=retryable,
            extensions={"user_id": user_id},
        )


class VehicleUnavailableError(ProblemDetailsException):
    """Exception when the vehicle cannot be booked at the requested time."""

    def __init__(
        self,
        vehicle_id: str,
        start_time: datetime,
        reason: str = "vehicle is not available at the requested time",
        retryable: bool = False,
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=400,
            title="Vehicle Unavailable",
            code="VEHICLE_UNAVAILABLE",
            detail=f"Vehicle '{vehicle_id}': {reason}",
            type_uri=f"{PROBLEM_BASE_URI}/vehicle-unavailable",
            instance=instance,
            retryable=retryable,
            extensions={
                "vehicle_id": vehicle_id,
                "start_time": start_time.isoformat(),
            },
        )


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    content = dict(exc.problem_details)
    content.setdefault("instance", request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=exc.headers,
        media_type="application/problem+json",
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Convert FastAPI request validation failures into Problem Details.

    Args:
        request: FastAPI request object
        exc: Validation error raised while parsing the request

    Returns:
        JSONResponse: Problem Details formatted response with violations
    """
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "invalid value"),
        }
        for error in exc.errors()
    ]
    problem = ValidationError(violations=violations, instance=request.url.path)
    return await problem_details_handler(request, problem)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={"error_id": error_id, "path": request.url.path},
    )

    problem_details = {
        "type": f"{PROBLEM_BASE_URI}/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "code": "INTERNAL_ERROR",
        "retryable": True,
        "detail": "An unexpected error occurred while processing the request",
        "instance": request.url.path,
        "error_id": error_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    return JSONResponse(
        status_code=500,
        content=problem_details,
        media_type="application/problem+json",
    )
