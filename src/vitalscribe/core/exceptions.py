"""
Exception handling for VitalScribe Interchange.

Infrastructure-level exceptions; business rule violations live in
``vitalscribe.domain.errors``.
"""

from typing import Any, Dict, Optional


class VitalScribeException(Exception):
    """Base exception class for the application."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(VitalScribeException):
    """Raised when there's a configuration error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "CONFIG_ERROR", details)


class DatabaseError(VitalScribeException):
    """Raised when the database cannot be reached or initialised."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "DATABASE_ERROR", details)


class AuthenticationError(VitalScribeException):
    """Raised when request credentials are missing or invalid."""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, "AUTH_ERROR", details)
