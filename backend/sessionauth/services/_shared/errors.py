"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between the token
core, the account flows and the API layer.

The translation to HTTP responses (RFC 7807) is handled by
``sessionauth/core/errors.py`` via ``BaseService.translate_exceptions()``.

Store and database failures (``redis.RedisError``,
``sqlalchemy.exc.SQLAlchemyError``) are not wrapped here: they
propagate unchanged and are never reported as a bad credential.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer or BaseService will later translate them to APIError.
    """

    pass


class ConfigurationError(RuntimeError):
    """Raised at startup when settings cannot produce a working token core."""


# --------------------------------------------------------------------------- #
# Credentials
# --------------------------------------------------------------------------- #


class UnauthorizedError(ServiceError):
    """The caller is not authenticated; a new sign-in may fix it (401)."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class InvalidCredentialError(UnauthorizedError):
    """Token is malformed, expired, of the wrong kind or badly signed."""

    def __init__(self, message: str = "Invalid credential") -> None:
        super().__init__(message)


class RevokedCredentialError(UnauthorizedError):
    """Token is cryptographically fine but its server-side record is not usable."""

    def __init__(self, message: str = "Invalid or revoked refresh token") -> None:
        super().__init__(message)


class ForbiddenError(ServiceError):
    """
    Credential is valid but the account state disallows access (403).

    Distinct from :class:`UnauthorizedError`: retrying with a fresh token does
    not help.
    """

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class AccountBlockedError(ForbiddenError):
    """The account is ``BLOCKED``."""

    def __init__(self, message: str = "The user is blocked") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Entities
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

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"


# --------------------------------------------------------------------------- #
# Activation
# --------------------------------------------------------------------------- #


class ActivationError(ServiceError):
    """Base for terminal activation-token states."""

    reason = "Activation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)


class TokenNotFoundError(ActivationError):
    reason = "Token not found"


class TokenAlreadyUsedError(ActivationError):
    reason = "Token already used"


class TokenExpiredError(ActivationError):
    reason = "Token expired"
