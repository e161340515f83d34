"""Unit tests for UserRepository."""

from datetime import UTC, datetime

import pytest
from sessionauth.repositories.user import UserRepository
from sessionauth.services._shared.ports import UserStatus
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs core persistence operations."""

    @pytest.fixture()
    def repo(self):
        return UserRepository()

    def test_get_by_email_is_case_insensitive(self, repo, session):
        u = UserFactory(email="alice@example.com")

        fetched = repo.get_by_email("  Alice@Example.COM ")
        assert fetched is not None
        assert fetched.id == u.id
        assert repo.get_by_email("ghost@example.com") is None

    def test_exists_by_email(self, repo, session):
        UserFactory(email="bob@example.com")

        assert repo.exists_by_email("bob@example.com")
        assert not repo.exists_by_email("nonexistent@example.com")

    def test_get_status(self, repo, session):
        u = UserFactory(status=UserStatus.UNVERIFIED)

        assert repo.get_status(u.id) is UserStatus.UNVERIFIED
        assert repo.get_status(999) is None

    def test_list_sorted_uses_pk_as_tiebreaker(self, repo, session):
        first = UserFactory(name="Same")
        second = UserFactory(name="Same")

        users = repo.list_sorted(sort_by="name", descending=True)
        assert [u.id for u in users] == [first.id, second.id]

    def test_update_status_many_block_and_unblock(self, repo, session):
        active = UserFactory(status=UserStatus.ACTIVE)
        blocked = UserFactory(status=UserStatus.BLOCKED)
        unverified = UserFactory(status=UserStatus.UNVERIFIED)
        ids = [active.id, blocked.id, unverified.id]

        assert repo.update_status_many(ids, UserStatus.BLOCKED) == 2
        session.commit()
        assert {repo.get_status(i) for i in ids} == {UserStatus.BLOCKED}

        assert repo.update_status_many([active.id], UserStatus.ACTIVE) == 1
        assert repo.update_status_many([], UserStatus.ACTIVE) == 0

    def test_delete_many_returns_existing_ids(self, repo, session):
        a_id = UserFactory().id
        b_id = UserFactory().id

        deleted = repo.delete_many([a_id, 999])
        session.commit()

        assert deleted == [a_id]
        assert repo.get_status(a_id) is None
        assert repo.get_status(b_id) is UserStatus.ACTIVE
        assert repo.delete_many([]) == []

    def test_delete_unverified(self, repo, session):
        keep_id = UserFactory(status=UserStatus.BLOCKED).id
        gone_id = UserFactory(status=UserStatus.UNVERIFIED).id

        assert repo.delete_unverified() == [gone_id]
        session.commit()
        assert repo.get_status(keep_id) is UserStatus.BLOCKED

    def test_touch_last_login(self, repo, session):
        u = UserFactory()
        at = datetime(2025, 3, 1, 8, 30, tzinfo=UTC)

        repo.touch_last_login(u, at)
        session.commit()

        assert repo.get(u.id).last_login_time.replace(tzinfo=UTC) == at
