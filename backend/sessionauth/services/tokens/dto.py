# sessionauth/services/tokens/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """
    Verified content of an access token.

    :param subject: User id the token was issued to.
    :type subject: str
    :param issued_at: Signing time (UTC).
    :type issued_at: datetime
    :param expires_at: End of validity (UTC).
    :type expires_at: datetime
    """

    subject: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class RefreshClaims:
    """
    Verified content of a refresh token (signature-level only).

    :param subject: Owner user id.
    :type subject: str
    :param jti: Identifier of the server-side record.
    :type jti: str
    :param expires_at: End of validity (UTC).
    :type expires_at: datetime
    """

    subject: str
    jti: str
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class IssuedRefreshToken:
    """
    Freshly minted refresh token with its persisted identifier.

    :param token: Encoded refresh JWT handed to the client.
    :type token: str
    :param jti: Record identifier embedded in ``token``.
    :type jti: str
    :param expires_at: Record and token expiry (UTC).
    :type expires_at: datetime
    """

    token: str
    jti: str
    expires_at: datetime
