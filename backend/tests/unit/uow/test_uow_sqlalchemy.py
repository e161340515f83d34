import pytest
from sessionauth.models.user import User
from sessionauth.uow import (
    SQLAlchemyReadOnlyUnitOfWork as ROuow,
)
from sessionauth.uow import (
    SQLAlchemyUnitOfWork as RWuow,
)
from sqlalchemy import func, select, text
from tests.factories.user import UserFactory


def _count(session) -> int:
    return session.execute(select(func.count(User.id))).scalar_one()


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_clean_exit(self, session):
        with RWuow() as uow:
            uow.users.add(UserFactory.build())

        session.rollback()
        assert _count(session) == 1

    def test_rolls_back_on_error(self, session):
        with pytest.raises(ValueError), RWuow() as uow:
            uow.users.add(UserFactory.build())
            raise ValueError("boom")

        assert _count(session) == 0


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_blocks_core_dml(self, session):
        """
        Ensure that raw SQL DML is blocked inside the RO UoW.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(text("DELETE FROM users"))

    def test_allows_reads(self, session):
        UserFactory()

        with ROuow() as uow:
            assert uow.users.exists_by_email(uow.users.list_sorted(
                sort_by="name", descending=False
            )[0].email)

    def test_disallows_commit(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError):
            uow.commit()

    def test_guards_are_removed_on_exit(self, session):
        with ROuow():
            pass

        with RWuow() as uow:
            uow.users.add(UserFactory.build())
        assert _count(session) == 1
