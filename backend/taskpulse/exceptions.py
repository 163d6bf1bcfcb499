"""
Structured exceptions and error responses for TaskPulse.

Provides consistent error handling across the API with:
- Custom exception classes
- Structured error response format
- FastAPI exception handlers
"""

from typing import Any, Dict, Optional, List
from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from taskpulse.logging_config import get_logger

logger = get_logger("taskpulse.error")


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """Detail of a single error."""
    loc: Optional[List[str]] = None  # Location of error (e.g., ["body", "title"])
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Structured error response format."""
    error: str  # Error code (e.g., "not_found", "validation_error")
    message: str  # Human-readable message
    details: Optional[List[ErrorDetail]] = None


# =============================================================================
# Custom Exceptions
# =============================================================================

class TaskPulseException(Exception):
    """Base exception for all TaskPulse errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        self.headers = headers
        super().__init__(message)


class NotFoundError(TaskPulseException):
    """Resource not found, or not owned by the caller."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} with ID {resource_id} not found",
            error_code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )
        self.resource = resource
        self.resource_id = resource_id


class ValidationError(TaskPulseException):
    """Input rejected before anything is written."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = None
        if field:
            details = [{
                "loc": ["body", field],
                "msg": message,
                "type": "value_error",
            }]
        super().__init__(
            message=message,
            error_code="validation_error",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )
        self.field = field


class NotAuthenticatedError(TaskPulseException):
    """No usable identity on the request."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            error_code="not_authenticated",
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )


class BackendUnavailableError(TaskPulseException):
    """The database call failed; the transaction was rolled back."""

    def __init__(self, operation: str):
        super().__init__(
            message=f"Could not {operation}: storage is unavailable, please retry",
            error_code="backend_unavailable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
        self.operation = operation


# =============================================================================
# Exception Handlers
# =============================================================================

async def taskpulse_exception_handler(request: Request, exc: TaskPulseException) -> JSONResponse:
    """Handle TaskPulseException and return structured response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.error_code,
            message=exc.message,
            details=exc.details,
        ).model_dump(),
        headers=exc.headers,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="internal_error",
            message="An unexpected error occurred",
        ).model_dump(),
    )


# Documented on every router; the handlers above produce these bodies
ERROR_RESPONSES = {
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ErrorResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
}


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(TaskPulseException, taskpulse_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
