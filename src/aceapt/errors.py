"""Domain error taxonomy.

Services raise these; ``aceapt.middleware.error_handler`` turns them into
``{"error": message}`` JSON responses with the matching status code.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Missing or malformed request fields."""

    status_code = 400


class AuthError(AppError):
    """No session, or the session token is invalid."""

    status_code = 401


class NotFoundError(AppError):
    """A referenced entity does not exist."""

    status_code = 404


class ConflictError(AppError):
    """The operation would duplicate a unique record."""

    status_code = 409


class InsufficientFundsError(AppError):
    """The user's coin balance does not cover the cost."""

    status_code = 400


class StoreError(AppError):
    """Any data-store failure. The message is safe to show to clients."""

    status_code = 500


class AccountLockedError(AppError):
    """Too many failed sign-in attempts; the account is temporarily locked."""

    status_code = 429
