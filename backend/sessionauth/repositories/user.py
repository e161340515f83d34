"""User repository: lookups, listing and bulk account maintenance."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import cast

from sqlalchemy import delete, select, update

from sessionauth.models.user import User
from sessionauth.repositories.base import BaseRepository, apply_sorting
from sessionauth.services._shared.ports import UserStatus


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never handles tokens or sessions, only DB-level user management.
    """

    model = User

    def _sortable_fields(self):
        """Expose sortable fields for safe public sorting."""
        return {
            "name": User.name,
            "email": User.email,
            "status": User.status,
            "registration_time": User.registration_time,
            "last_login_time": User.last_login_time,
        }

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def get_status(self, user_id: int) -> UserStatus | None:
        """Return only the status column of ``user_id`` (or ``None``)."""
        stmt = select(User.status).where(User.id == user_id)
        return cast(UserStatus | None, self.session.execute(stmt).scalar_one_or_none())

    def list_sorted(self, *, sort_by: str, descending: bool) -> Sequence[User]:
        """List every user ordered by a whitelisted column."""
        stmt = apply_sorting(
            select(User),
            self._sortable_fields(),
            sort_by,
            descending=descending,
            pk_attr=self._pk_attr(),
        )
        return list(self.session.execute(stmt).scalars().all())

    # ---------------------------- Bulk maintenance ----------------------------

    def delete_many(self, user_ids: Iterable[int]) -> list[int]:
        """Hard-delete the given users. :returns: Ids that actually existed."""
        ids = list(user_ids)
        if not ids:
            return []
        found = list(self.session.execute(select(User.id).where(User.id.in_(ids))).scalars())
        if found:
            self.session.execute(
                delete(User).where(User.id.in_(found)).execution_options(synchronize_session=False)
            )
        return found

    def delete_unverified(self) -> list[int]:
        """Hard-delete every ``UNVERIFIED`` user. :returns: Deleted ids."""
        found = list(
            self.session.execute(
                select(User.id).where(User.status == UserStatus.UNVERIFIED)
            ).scalars()
        )
        if found:
            self.session.execute(
                delete(User).where(User.id.in_(found)).execution_options(synchronize_session=False)
            )
        return found

    def update_status_many(self, user_ids: Iterable[int], status: UserStatus) -> int:
        """
        Conditionally move users to ``status``.

        ``ACTIVE`` applies only to currently ``BLOCKED`` users (unblock);
        ``BLOCKED`` applies to every user not already blocked.

        :returns: Number of rows changed.
        """
        ids = list(user_ids)
        if not ids:
            return 0
        stmt = update(User).where(User.id.in_(ids))
        if status is UserStatus.ACTIVE:
            stmt = stmt.where(User.status == UserStatus.BLOCKED)
        else:
            stmt = stmt.where(User.status != status)
        result = self.session.execute(
            stmt.values(status=status).execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)

    def touch_last_login(self, user: User, at: datetime) -> None:
        user.last_login_time = at
        self.flush()
