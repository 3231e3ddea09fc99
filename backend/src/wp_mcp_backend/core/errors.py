"""Error handling with RFC 7807 Problem Details support."""

from enum import Enum
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class ErrorCode(str, Enum):
    """Standardized error codes for transport-level failures."""

    REQUEST_TOO_LARGE = "request_too_large"
    INVALID_CONTENT_LENGTH = "invalid_content_length"
    SERVICE_UNAVAILABLE = "service_unavailable"


class AppError(Exception):
    """
    Structured application error following RFC 7807 Problem Details.

    Attributes:
        code: Error code from ErrorCode enum
        message: Human-readable error message
        status: HTTP status code
        details: Additional error context
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status: int = 500,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status = status
        self.details = details or {}
        super().__init__(message)

    def to_problem_detail(self, instance: str) -> dict[str, Any]:
        """
        Convert error to RFC 7807 Problem Details format.

        Args:
            instance: The request path where the error occurred

        Returns:
            Dictionary in RFC 7807 format
        """
        problem = {
            "type": f"https://api.example.com/errors/{self.code.value.replace('_', '-')}",
            "title": self.code.value.replace("_", " ").title(),
            "status": self.status,
            "detail": self.message,
            "instance": instance,
        }
        if self.details:
            problem["errors"] = self.details
        return problem


class RequestTooLargeError(AppError):
    """Error when the request body exceeds the configured limit."""

    def __init__(self, max_bytes: int) -> None:
        super().__init__(
            code=ErrorCode.REQUEST_TOO_LARGE,
            message="Request body too large",
            status=413,
            details={"max_bytes": max_bytes},
        )


class InvalidContentLengthError(AppError):
    """Error when the Content-Length header is not an integer."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_CONTENT_LENGTH,
            message="Invalid content-length header",
            status=400,
        )


class ServiceNotReadyError(AppError):
    """Error when the MCP server has not been initialized."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.SERVICE_UNAVAILABLE,
            message="MCP server not initialized",
            status=503,
        )


class BackendError(Exception):
    """Base class for failures reported by an external collaborator.

    Tool handlers turn these into ``Error: ...`` tool results; they never
    reach the client as HTTP or JSON-RPC errors.
    """


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    FastAPI exception handler for AppError.

    Converts AppError to RFC 7807 Problem Details JSON response.

    Args:
        request: The FastAPI request object
        exc: The AppError exception

    Returns:
        JSONResponse with Problem Details format
    """
    return JSONResponse(
        status_code=exc.status,
        content=exc.to_problem_detail(str(request.url.path)),
    )
