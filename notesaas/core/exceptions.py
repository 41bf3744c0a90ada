"""
Custom exception hierarchy for the application.

Services raise these; the handlers registered in ``notesaas.main``
translate them into the ``{"success": false, "error": ...}`` envelope.
"""

from typing import Any

from fastapi import status


class NoteSaaSException(Exception):
    """Base exception for all application exceptions."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "internal"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(NoteSaaSException):
    """Raised when authentication fails."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "unauthenticated"


class AuthorizationError(NoteSaaSException):
    """Raised when user lacks permissions."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"


class ResourceNotFoundError(NoteSaaSException):
    """Raised when a requested resource doesn't exist (or lives in another tenant)."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"


class ValidationError(NoteSaaSException):
    """Raised when input validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "validation_error"


class ConflictError(NoteSaaSException):
    """Raised when a write collides with existing state."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "conflict"


class LastAdminProtectedError(ConflictError):
    """Raised when an operation would leave a tenant without an Admin."""

    error_code = "last_admin_protected"


class QuotaExceededError(NoteSaaSException):
    """Raised when tenant exceeds resource quota."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "quota_exceeded"


class InvalidOrExpiredTokenError(NoteSaaSException):
    """Raised when an invitation token is unknown, used or lapsed."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "invalid_or_expired_token"


class InternalError(NoteSaaSException):
    """Raised on unexpected store/transport failures."""
