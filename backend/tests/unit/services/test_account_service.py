# tests/unit/services/test_account_service.py
from __future__ import annotations

from datetime import timedelta

import pytest
from sessionauth.models.user import User
from sessionauth.services._shared.errors import (
    AccountBlockedError,
    ConflictError,
    NotFoundError,
    TokenAlreadyUsedError,
    TokenExpiredError,
    TokenNotFoundError,
    UnauthorizedError,
)
from sessionauth.services._shared.ports import UserStatus
from sessionauth.services.accounts.dto import LoginIn, RegisterIn
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


def _token_from_url(url: str) -> str:
    return url.rsplit("/", 1)[1]


def _refresh_jti(components, refresh_token: str) -> str:
    return components.tokens.verify_refresh_signature(refresh_token).jti


class TestRegister:
    def test_creates_unverified_user_and_sends_link(self, components, notifier, session):
        out = components.accounts.register(
            RegisterIn(name="Ada", email="Ada@Example.com", password="secret")
        )

        assert out.user.status is UserStatus.UNVERIFIED
        assert out.user.email == "ada@example.com"
        stored = session.get(User, out.user.id)
        assert stored.verify_password("secret")

        assert len(notifier.sent) == 1
        message = notifier.sent[0]
        assert message["email"] == "ada@example.com"
        assert message["activation_url"].startswith("http://api.test/api/v1/auth/activate/")
        token = _token_from_url(message["activation_url"])
        assert components.activation.verify(token).user_id == str(out.user.id)

        # Registration signs the user in right away.
        claims = components.tokens.verify_access(out.tokens.access_token)
        assert claims.subject == str(out.user.id)
        assert components.tokens.is_refresh_valid(_refresh_jti(components, out.tokens.refresh_token))

    def test_duplicate_email_conflicts(self, components, notifier, session):
        UserFactory(email="taken@example.com")

        with pytest.raises(ConflictError):
            components.accounts.register(
                RegisterIn(name="Other", email="TAKEN@example.com", password="x")
            )
        assert notifier.sent == []


class TestLogin:
    def test_success_updates_last_login(self, components, session, clock):
        user = UserFactory(email="bob@example.com")

        out = components.accounts.login(LoginIn(email="bob@example.com", password=DEFAULT_PASSWORD))

        assert out.user.id == user.id
        assert out.user.last_login_time is not None
        assert components.tokens.verify_access(out.tokens.access_token).subject == str(user.id)

    @pytest.mark.parametrize(
        ("email", "password"),
        [("bob@example.com", "wrong"), ("nobody@example.com", DEFAULT_PASSWORD)],
    )
    def test_bad_credentials(self, components, session, email, password):
        UserFactory(email="bob@example.com")
        with pytest.raises(UnauthorizedError, match="Invalid email or password"):
            components.accounts.login(LoginIn(email=email, password=password))

    def test_blocked_user_is_refused(self, components, session):
        UserFactory(email="bob@example.com", status=UserStatus.BLOCKED)

        with pytest.raises(AccountBlockedError):
            components.accounts.login(LoginIn(email="bob@example.com", password=DEFAULT_PASSWORD))

    def test_password_is_checked_before_block(self, components, session):
        UserFactory(email="bob@example.com", status=UserStatus.BLOCKED)

        with pytest.raises(UnauthorizedError) as excinfo:
            components.accounts.login(LoginIn(email="bob@example.com", password="wrong"))
        assert not isinstance(excinfo.value, AccountBlockedError)

    def test_unverified_user_can_log_in(self, components, session):
        UserFactory(email="new@example.com", status=UserStatus.UNVERIFIED)
        out = components.accounts.login(LoginIn(email="new@example.com", password=DEFAULT_PASSWORD))
        assert out.user.status is UserStatus.UNVERIFIED


class TestActivate:
    def test_activates_and_consumes(self, components, session):
        user = UserFactory(status=UserStatus.UNVERIFIED)
        token = components.activation.issue(user.id)

        out = components.accounts.activate(token)

        assert out.status is UserStatus.ACTIVE
        assert session.get(User, user.id).status is UserStatus.ACTIVE
        with pytest.raises(TokenAlreadyUsedError):
            components.accounts.activate(token)

    def test_blocked_user_stays_blocked(self, components, session):
        user = UserFactory(status=UserStatus.BLOCKED)
        token = components.activation.issue(user.id)

        out = components.accounts.activate(token)

        assert out.status is UserStatus.BLOCKED
        with pytest.raises(TokenAlreadyUsedError):
            components.accounts.activate(token)

    def test_expired_token_leaves_status(self, components, session, clock):
        user = UserFactory(status=UserStatus.UNVERIFIED)
        token = components.activation.issue(user.id)
        clock.advance(timedelta(hours=24))

        with pytest.raises(TokenExpiredError):
            components.accounts.activate(token)
        assert session.get(User, user.id).status is UserStatus.UNVERIFIED

    def test_unknown_token(self, components, session):
        with pytest.raises(TokenNotFoundError):
            components.accounts.activate("nope")

    def test_deleted_user_keeps_token_unconsumed(self, components, session):
        token = components.activation.issue(12345)

        with pytest.raises(NotFoundError):
            components.accounts.activate(token)
        assert components.activation.verify(token).valid is True


class TestQueries:
    def test_get_profile(self, components, session):
        user = UserFactory(name="Grace")
        assert components.accounts.get_profile(str(user.id)).name == "Grace"
        with pytest.raises(NotFoundError):
            components.accounts.get_profile(999)

    def test_list_users_sorting(self, components, session):
        for name in ("Carol", "Alice", "Bob"):
            UserFactory(name=name)

        asc = components.accounts.list_users(sort_by="name", order="asc")
        desc = components.accounts.list_users(sort_by="name", order="desc")
        fallback = components.accounts.list_users(sort_by="password_hash", order="sideways")

        assert [u.name for u in asc] == ["Alice", "Bob", "Carol"]
        assert [u.name for u in desc] == ["Carol", "Bob", "Alice"]
        assert len(fallback) == 3


class TestMaintenance:
    def test_block_commits_status_and_revokes_sessions(self, components, session):
        user = UserFactory()
        other = UserFactory()
        pair = components.sessions.create_session(user.id)
        other_pair = components.sessions.create_session(other.id)

        count = components.accounts.update_status_many([user.id], UserStatus.BLOCKED)

        assert count == 1
        assert session.get(User, user.id).status is UserStatus.BLOCKED
        assert not components.tokens.is_refresh_valid(_refresh_jti(components, pair.refresh_token))
        assert components.tokens.is_refresh_valid(
            _refresh_jti(components, other_pair.refresh_token)
        )

    def test_unblock_only_touches_blocked_users(self, components, session):
        blocked = UserFactory(status=UserStatus.BLOCKED)
        unverified = UserFactory(status=UserStatus.UNVERIFIED)

        count = components.accounts.update_status_many(
            [blocked.id, unverified.id], UserStatus.ACTIVE
        )

        assert count == 1
        assert session.get(User, blocked.id).status is UserStatus.ACTIVE
        assert session.get(User, unverified.id).status is UserStatus.UNVERIFIED

    def test_delete_many_revokes_sessions(self, components, session):
        user_id = UserFactory().id
        pair = components.sessions.create_session(user_id)

        assert components.accounts.delete_many([user_id, 424242]) == 1
        assert session.get(User, user_id) is None
        assert not components.tokens.is_refresh_valid(_refresh_jti(components, pair.refresh_token))

    def test_delete_unverified(self, components, session):
        keep = UserFactory(status=UserStatus.ACTIVE)
        UserFactory(status=UserStatus.UNVERIFIED)
        UserFactory(status=UserStatus.UNVERIFIED)

        assert components.accounts.delete_unverified() == 2
        remaining = components.accounts.list_users()
        assert [u.id for u in remaining] == [keep.id]
