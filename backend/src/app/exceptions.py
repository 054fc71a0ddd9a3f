"""Custom exception classes for the application.

This module provides domain-specific exception classes that carry
appropriate HTTP status codes and structured error information.
"""

from __future__ import annotations

from typing import Any
from typing import Optional


class AppError(Exception):
    """Base exception for application errors.

    All application-specific exceptions should inherit from this class.
    Each exception carries an HTTP status code and optional details.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code (default 500).
        detail: Optional additional context.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to an error envelope."""
        return {"success": False, "error": self.message}


class ValidationError(AppError):
    """Raised when input validation fails.

    Use for malformed requests, invalid parameter values,
    or unique constraint violations reported by the database.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        detail = f"Field: {field}" if field else None
        super().__init__(message, status_code=400, detail=detail)
        self.field = field


class NotFoundError(AppError):
    """Raised when a requested resource is not found.

    The identifier is kept for logging only; the client sees a generic
    message.
    """

    def __init__(self, resource: str, identifier: Any):
        super().__init__(f"{resource} not found", status_code=404)
        self.resource = resource
        self.identifier = identifier


class UnsupportedMethodError(AppError):
    """Raised when the HTTP method has no handler."""

    def __init__(self, method: str):
        super().__init__("Unsupported HTTP method", status_code=400)
        self.method = method


class ConfigurationError(AppError):
    """Raised when required configuration is missing.

    Use when environment variables or settings are not properly configured.
    """

    def __init__(self, config_name: str):
        super().__init__(
            f"Missing required configuration: {config_name}",
            status_code=500,
        )
        self.config_name = config_name


class DatabaseError(AppError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(
            message,
            status_code=500,
            detail=detail,
        )


class DatabaseConnectionError(DatabaseError):
    """Raised when credentials cannot be fetched or the connection fails.

    Never retried; surfaced to the caller as HTTP 500.
    """
