"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or HTTP.
They serve as stable contracts between repositories, ports, adapters and
application services.

The translation to HTTP responses (RFC 7807) is handled by
``accounts/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

#: Client-facing message for every token verification failure.
INVALID_TOKEN_MESSAGE = "Invalid or expired token"

#: Client-facing message for every credential verification failure.
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, adapters or domain logic.
    - The error handlers translate them to ``APIError`` at the HTTP edge.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation, surfaced verbatim.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return self.detail


class AuthenticationError(ServiceError):
    """
    Raised when credentials or tokens cannot be verified.

    The message is deliberately generic; the underlying cause is logged by the
    raising component and never attached to the error.
    """

    def __init__(self, message: str = INVALID_TOKEN_MESSAGE) -> None:
        super().__init__(message)


class AuthorizationError(ServiceError):
    """
    Raised when an authenticated identity lacks permission for an operation.

    :param message: Reason naming the required and the actual role.
    :type message: str
    """

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class StoreUnavailableError(ServiceError):
    """
    Raised by store adapters when the backing key-value store times out or
    cannot be reached.
    """

    def __init__(self, message: str = "Key-value store unavailable") -> None:
        super().__init__(message)
