# sessionauth/services/activation/dto.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sessionauth.services._shared.errors import (
    ActivationError,
    TokenAlreadyUsedError,
    TokenExpiredError,
    TokenNotFoundError,
)


class ActivationFailure(str, Enum):
    """Terminal reasons an activation token is refused."""

    NOT_FOUND = "TokenNotFound"
    ALREADY_USED = "TokenAlreadyUsed"
    EXPIRED = "TokenExpired"

    def to_error(self) -> ActivationError:
        """Build the matching service exception."""
        return {
            ActivationFailure.NOT_FOUND: TokenNotFoundError,
            ActivationFailure.ALREADY_USED: TokenAlreadyUsedError,
            ActivationFailure.EXPIRED: TokenExpiredError,
        }[self]()


@dataclass(frozen=True, slots=True)
class ActivationCheck:
    """
    Outcome of :meth:`ActivationService.verify`.

    :param valid: ``True`` when the token may be consumed.
    :param user_id: Owner of the token (set only when ``valid``).
    :param reason: Failure reason (set only when not ``valid``).
    """

    valid: bool
    user_id: str | None = None
    reason: ActivationFailure | None = None

    @classmethod
    def ok(cls, user_id: str) -> ActivationCheck:
        return cls(valid=True, user_id=user_id)

    @classmethod
    def rejected(cls, reason: ActivationFailure) -> ActivationCheck:
        return cls(valid=False, reason=reason)
