# sessionauth/services/sessions/dto.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TokenPair:
    """Access/refresh pair returned to the client."""

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class TerminationOutcome:
    """
    Result of an advisory logout.

    :param revoked: Whether a refresh record was revoked by this call.
    :param error: The failure that was ignored, kept for observability.
    """

    revoked: bool
    error: Exception | None = None
