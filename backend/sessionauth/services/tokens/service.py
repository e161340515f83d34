# sessionauth/services/tokens/service.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sessionauth.core.settings import AuthSettings
from sessionauth.services._shared.errors import InvalidCredentialError
from sessionauth.services._shared.ports import (
    ClaimResult,
    Clock,
    RefreshTokenRecord,
    RefreshTokenStore,
    SystemClock,
    TokenCodec,
    TokenKind,
)
from sessionauth.services.tokens.dto import (
    AccessClaims,
    IssuedRefreshToken,
    RefreshClaims,
)

log = logging.getLogger(__name__)


def _new_jti() -> str:
    return uuid4().hex


class TokenService:
    """
    Signs and verifies access tokens (stateless) and manages refresh tokens
    (signed *and* persisted, revocable).

    Access tokens are never stored and cannot be revoked; they die at ``exp``.
    Refresh tokens carry a ``jti`` pointing at a :class:`RefreshTokenRecord`,
    which is the authority on whether the token is still usable.
    """

    def __init__(
        self,
        *,
        settings: AuthSettings,
        codec: TokenCodec,
        refresh_store: RefreshTokenStore,
        clock: Clock | None = None,
        jti_factory: Callable[[], str] = _new_jti,
    ) -> None:
        """
        :param settings: Lifetimes (and, through the codec, secrets).
        :param codec: Adapter for signing/decoding tokens.
        :param refresh_store: Credential store for refresh records.
        :param clock: Time source; defaults to the wall clock.
        :param jti_factory: Generator of unique refresh identifiers.
        """
        self.settings = settings
        self.codec = codec
        self.refresh_store = refresh_store
        self.clock = clock or SystemClock()
        self._new_jti = jti_factory

    # ------------------------------------------------------------------ #
    # Access tokens
    # ------------------------------------------------------------------ #

    def sign_access(self, user_id: int | str) -> str:
        """Sign a short-lived access token for ``user_id``. No I/O."""
        now = self.clock.now()
        payload = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.settings.access_ttl).timestamp()),
        }
        return self.codec.encode(payload, kind=TokenKind.ACCESS)

    def verify_access(self, token: str) -> AccessClaims:
        """
        Verify an access token.

        :raises InvalidCredentialError: Bad signature, malformed or expired.
        """
        claims = self.codec.decode(token, kind=TokenKind.ACCESS)
        expires_at = self._check_not_expired(claims)
        return AccessClaims(
            subject=str(claims["sub"]),
            issued_at=self._ts(claims["iat"]),
            expires_at=expires_at,
        )

    # ------------------------------------------------------------------ #
    # Refresh tokens
    # ------------------------------------------------------------------ #

    def issue_refresh(self, user_id: int | str) -> IssuedRefreshToken:
        """
        Persist a new refresh record, then sign the token that points at it.

        The record is written *before* the JWT exists so there is never a
        handed-out token without server-side state.
        """
        now = self.clock.now()
        jti = self._new_jti()
        expires_at = now + self.settings.refresh_ttl
        self.refresh_store.add(
            RefreshTokenRecord(
                jti=jti,
                user_id=str(user_id),
                expires_at=expires_at,
                created_at=now,
            )
        )
        token = self.codec.encode(
            {
                "sub": str(user_id),
                "jti": jti,
                "iat": int(now.timestamp()),
                "exp": int(expires_at.timestamp()),
            },
            kind=TokenKind.REFRESH,
        )
        return IssuedRefreshToken(token=token, jti=jti, expires_at=expires_at)

    def verify_refresh_signature(self, token: str) -> RefreshClaims:
        """
        Signature, structure and expiry check only; the store is not consulted.

        :raises InvalidCredentialError: When the token cannot be trusted.
        """
        claims = self.codec.decode(token, kind=TokenKind.REFRESH)
        expires_at = self._check_not_expired(claims)
        return RefreshClaims(
            subject=str(claims["sub"]),
            jti=str(claims["jti"]),
            expires_at=expires_at,
        )

    def is_refresh_valid(self, jti: str) -> bool:
        """``True`` iff the record exists, is not revoked and not expired."""
        record = self.refresh_store.get(jti)
        return record is not None and record.is_valid(self.clock.now())

    def claim_refresh(self, jti: str) -> ClaimResult:
        """
        Atomically check-and-revoke a refresh record.

        This is the single-use gate of rotation: concurrent callers presenting
        the same ``jti`` get ``OK`` at most once.
        """
        return self.refresh_store.claim(jti, now=self.clock.now())

    def revoke(self, jti: str) -> None:
        """Mark ``jti`` revoked. Idempotent; unknown identifiers are a no-op."""
        self.refresh_store.revoke(jti)

    def revoke_all_for_user(self, user_id: int | str) -> int:
        """
        Revoke every outstanding refresh record of ``user_id``.

        .. note::
           Best effort with respect to a concurrent :meth:`issue_refresh` for
           the same user: a token issued while this runs may survive. Callers
           that need a hard stop must also deny the account at admission time.
        """
        count = self.refresh_store.revoke_all_for_user(str(user_id))
        log.info("tokens.revoked_all user_id=%s count=%s", user_id, count)
        return count

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _ts(value: Any) -> datetime:
        try:
            return datetime.fromtimestamp(int(value), tz=UTC)
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            raise InvalidCredentialError("Malformed time claim") from exc

    def _check_not_expired(self, claims: dict[str, Any]) -> datetime:
        expires_at = self._ts(claims["exp"])
        if self.clock.now() >= expires_at:
            raise InvalidCredentialError("Token expired")
        return expires_at
