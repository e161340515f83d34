# sessionauth/services/sessions/service.py
from __future__ import annotations

import logging

from sessionauth.services._shared.errors import (
    InvalidCredentialError,
    RevokedCredentialError,
)
from sessionauth.services._shared.ports import ClaimResult
from sessionauth.services.sessions.dto import TerminationOutcome, TokenPair
from sessionauth.services.tokens.service import TokenService

log = logging.getLogger(__name__)


class SessionManager:
    """
    Orchestrates the token service into sessions: creation after login or
    registration, refresh rotation and logout.
    """

    def __init__(self, *, tokens: TokenService) -> None:
        self.tokens = tokens

    def create_session(self, user_id: int | str) -> TokenPair:
        """Sign an access token and issue a persisted refresh token."""
        access = self.tokens.sign_access(user_id)
        refresh = self.tokens.issue_refresh(user_id)
        return TokenPair(access_token=access, refresh_token=refresh.token)

    def refresh_session(self, refresh_token: str) -> TokenPair:
        """
        Rotate ``refresh_token`` into a brand-new pair.

        The presented token is revoked by the same atomic claim that checks it,
        so it can never be used again; of two concurrent calls with the same
        token, exactly one succeeds.

        :raises InvalidCredentialError: Bad signature, malformed or expired token.
        :raises RevokedCredentialError: Record unknown, revoked or expired.
        """
        claims = self.tokens.verify_refresh_signature(refresh_token)

        result = self.tokens.claim_refresh(claims.jti)
        if result is not ClaimResult.OK:
            log.info("session.refresh.rejected user_id=%s result=%s", claims.subject, result.name)
            raise RevokedCredentialError()

        pair = self.create_session(claims.subject)
        log.info("session.rotated user_id=%s", claims.subject)
        return pair

    def terminate_session(self, refresh_token: str) -> TerminationOutcome:
        """
        Best-effort logout: revoke the refresh record if the token verifies.

        Never raises. Any failure is logged and returned in the outcome so the
        caller can still answer with success.
        """
        try:
            claims = self.tokens.verify_refresh_signature(refresh_token)
            self.tokens.revoke(claims.jti)
        except InvalidCredentialError as exc:
            log.info("session.terminate.ignored reason=%s", exc)
            return TerminationOutcome(revoked=False, error=exc)
        except Exception as exc:
            log.warning("session.terminate.ignored reason=%s", exc, exc_info=True)
            return TerminationOutcome(revoked=False, error=exc)
        return TerminationOutcome(revoked=True)
