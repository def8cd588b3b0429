"""Errors tailored for this project.

This module provides:
- PastebinError: the base error, carries the HTTP status it maps to
- ValidationError: A request body or parameter is malformed or out of bounds
- AuthenticationError: A token or credentials are missing, invalid or expired
- AuthorizationError: A known caller lacks the rights for an action
- NotFoundError: A paste, a user or another resource is not found
- GoneError: A paste expired
- ConflictError: A user already exists. Who could've thought?
- InternalError: Something broke on our side, details stay in the logs
"""

from http import HTTPStatus


class PastebinError(Exception):
    """Base error with an HTTP status and a client-facing message."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str | None = None):
        super().__init__(message or self.status.phrase)
        self.message = message or self.status.phrase


class ValidationError(PastebinError, ValueError):
    """A request body or parameter is malformed or out of bounds."""

    status = HTTPStatus.BAD_REQUEST


class AuthenticationError(PastebinError):
    """A token or credentials are missing, invalid or expired."""

    status = HTTPStatus.UNAUTHORIZED


class AuthorizationError(PastebinError):
    """A known caller lacks the rights for an action."""

    status = HTTPStatus.FORBIDDEN


class NotFoundError(PastebinError, LookupError):
    """A paste, a user or another resource was not found."""

    status = HTTPStatus.NOT_FOUND


class GoneError(PastebinError):
    """A paste expired."""

    status = HTTPStatus.GONE


class ConflictError(PastebinError):
    """A user already exists."""

    status = HTTPStatus.CONFLICT


class InternalError(PastebinError, RuntimeError):
    """Something broke on our side."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR
