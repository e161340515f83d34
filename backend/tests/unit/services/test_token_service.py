# tests/unit/services/test_token_service.py
from __future__ import annotations

from datetime import timedelta

import pytest
from sessionauth.services._shared.errors import InvalidCredentialError
from sessionauth.services._shared.ports import ClaimResult


class TestAccessTokens:
    def test_sign_and_verify(self, token_service, clock):
        token = token_service.sign_access(42)
        claims = token_service.verify_access(token)

        assert claims.subject == "42"
        assert claims.issued_at == clock.now()
        assert claims.expires_at == clock.now() + timedelta(minutes=30)

    def test_expires_exactly_at_exp(self, token_service, clock):
        token = token_service.sign_access(1)

        clock.advance(timedelta(minutes=30) - timedelta(seconds=1))
        token_service.verify_access(token)

        clock.advance(timedelta(seconds=1))
        with pytest.raises(InvalidCredentialError, match="expired"):
            token_service.verify_access(token)

    def test_refresh_token_is_not_an_access_token(self, token_service):
        issued = token_service.issue_refresh(1)
        with pytest.raises(InvalidCredentialError):
            token_service.verify_access(issued.token)

    def test_garbage_is_rejected(self, token_service):
        with pytest.raises(InvalidCredentialError):
            token_service.verify_access("garbage")


class TestRefreshTokens:
    def test_issue_persists_record_before_handing_out(self, token_service, refresh_store, clock):
        issued = token_service.issue_refresh(7)

        record = refresh_store.get(issued.jti)
        assert record is not None
        assert record.user_id == "7"
        assert record.revoked is False
        assert record.expires_at == clock.now() + timedelta(days=7)
        assert token_service.verify_refresh_signature(issued.token).jti == issued.jti

    def test_jti_is_unique_per_issue(self, token_service):
        first = token_service.issue_refresh(7)
        second = token_service.issue_refresh(7)
        assert first.jti != second.jti
        assert first.token != second.token

    def test_access_token_is_not_a_refresh_token(self, token_service):
        with pytest.raises(InvalidCredentialError):
            token_service.verify_refresh_signature(token_service.sign_access(1))

    def test_expired_refresh_signature(self, token_service, clock):
        issued = token_service.issue_refresh(1)
        clock.advance(timedelta(days=7))
        with pytest.raises(InvalidCredentialError):
            token_service.verify_refresh_signature(issued.token)
        assert token_service.is_refresh_valid(issued.jti) is False

    def test_claim_is_single_use(self, token_service):
        issued = token_service.issue_refresh(1)

        assert token_service.claim_refresh(issued.jti) is ClaimResult.OK
        assert token_service.claim_refresh(issued.jti) is ClaimResult.REVOKED
        assert token_service.claim_refresh("unknown") is ClaimResult.NOT_FOUND
        assert token_service.is_refresh_valid(issued.jti) is False

    def test_revoke_is_idempotent(self, token_service):
        issued = token_service.issue_refresh(1)

        token_service.revoke(issued.jti)
        token_service.revoke(issued.jti)
        token_service.revoke("never-issued")

        assert token_service.is_refresh_valid(issued.jti) is False

    def test_revoke_all_then_new_tokens_are_valid(self, token_service):
        a = token_service.issue_refresh(1)
        b = token_service.issue_refresh(1)
        other = token_service.issue_refresh(2)

        assert token_service.revoke_all_for_user(1) == 2
        assert not token_service.is_refresh_valid(a.jti)
        assert not token_service.is_refresh_valid(b.jti)
        assert token_service.is_refresh_valid(other.jti)

        fresh = token_service.issue_refresh(1)
        assert token_service.is_refresh_valid(fresh.jti)
