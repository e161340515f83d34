# sessionauth/infra/sql/user_directory.py
from __future__ import annotations

from collections.abc import Callable

from sessionauth.services._shared.ports import AccountSnapshot, UserDirectory
from sessionauth.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork


class SqlUserDirectory(UserDirectory):
    """
    Live account lookups against the ``users`` table.

    Each call opens its own read-only unit of work, so admission always sees
    the committed status (a block takes effect on the very next request).
    """

    def __init__(
        self,
        uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self._uow_factory = uow_factory

    def get_account(self, user_id: str) -> AccountSnapshot | None:
        try:
            pk = int(user_id)
        except (TypeError, ValueError):
            return None
        with self._uow_factory() as uow:
            status = uow.users.get_status(pk)
        if status is None:
            return None
        return AccountSnapshot(id=str(pk), status=status)
