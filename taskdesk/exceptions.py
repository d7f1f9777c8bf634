"""
Typed errors raised by the service layer.

Each error carries the HTTP status it maps to; ``main.py`` registers a single
handler that turns them into ``{"detail": ...}`` responses.
"""
from fastapi import status


class TaskDeskError(Exception):
    """Base class for domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(TaskDeskError):
    """Referenced task or user is absent or soft-deleted."""

    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(TaskDeskError):
    """Caller is authenticated but not allowed to perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(TaskDeskError):
    """A unique field is already taken."""

    status_code = status.HTTP_409_CONFLICT


class UnauthenticatedError(TaskDeskError):
    """Credential missing, malformed, expired or rejected by the identity provider."""

    status_code = status.HTTP_401_UNAUTHORIZED


class UploadRejectedError(TaskDeskError):
    """Uploaded file failed validation."""

    status_code = status.HTTP_400_BAD_REQUEST


class IdentityProviderError(TaskDeskError):
    """The identity provider could not be reached or returned an error."""

    status_code = status.HTTP_502_BAD_GATEWAY
