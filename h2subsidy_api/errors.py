"""
Error taxonomy for the API.

Every error carries the HTTP status it maps to and a client-safe message.
Store details never leave the server: they are logged where the error is
raised and replaced with a generic message.
"""

from fastapi import status


class SubsidyError(Exception):
    """Base class for errors rendered as ``{"message": ...}`` responses."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SubsidyError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(SubsidyError):
    """Unknown email or wrong password (indistinguishable on purpose)."""

    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(SubsidyError):
    """Valid credentials, wrong portal."""

    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(SubsidyError):
    """Duplicate unique key."""

    status_code = status.HTTP_409_CONFLICT


class StoreError(SubsidyError):
    """Unexpected store or connectivity failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class SchemaError(RuntimeError):
    """The schema could not be ensured; the server must not start."""
