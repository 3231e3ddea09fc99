"""Core utilities shared across the backend."""

from .errors import (
    AppError,
    BackendError,
    ErrorCode,
    InvalidContentLengthError,
    RequestTooLargeError,
    ServiceNotReadyError,
    app_error_handler,
)

__all__ = [
    "AppError",
    "BackendError",
    "ErrorCode",
    "InvalidContentLengthError",
    "RequestTooLargeError",
    "ServiceNotReadyError",
    "app_error_handler",
]
