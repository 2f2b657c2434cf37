"""Application-specific exceptions.

Each error carries the HTTP status it maps to; handlers in
`taskhub.core.exception_handlers` render them into the response envelope.
"""
from fastapi import status


class AppError(Exception):
    """Base class for errors that are reported to the caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status_code={self.status_code})"


class BadRequest(AppError):
    """Malformed input or a business-rule rejection."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class Unauthenticated(AppError):
    """Missing, invalid or expired credentials."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(AppError):
    """Authenticated, but not permitted."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(AppError):
    """Referenced entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(AppError):
    """Uniqueness violation."""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"
