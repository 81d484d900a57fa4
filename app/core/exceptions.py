"""
Base exception classes for application-wide error handling.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures
    ├── AuthenticationError - Credential missing or rejected
    └── ConflictError - State conflicts (duplicates, concurrent creation)

Usage:
    from core.exceptions import ConflictError

    raise ConflictError(
        "A chat already exists for this request",
        error_code="CHAT_ALREADY_EXISTS",
        details={"request_id": request.id},
    )

    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=409)

Note:
    These exceptions are for domain errors. DRF handles API-layer exceptions
    (serialization, HTTP authentication) itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API responses.

        Example:
            {
                "error": "channel not found or access denied",
                "error_code": "CHAT_NOT_FOUND",
                "details": {"request_id": 12}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails in the service layer.

    For DRF request bodies use serializer validation instead.
    """

    default_error_code: str = "VALIDATION_ERROR"


class AuthenticationError(BaseApplicationError):
    """
    Raised when a credential is missing, invalid, or resolves to no usable user.

    Used by the websocket handshake, where DRF's AuthenticationFailed does
    not apply. Subclasses carry the websocket close code to use.
    """

    default_error_code: str = "AUTHENTICATION_FAILED"
    close_code: int = 4001


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Use for unique constraint violations and concurrent duplicate creation.
    HTTP 409 Conflict is the matching status.
    """

    default_error_code: str = "CONFLICT"
