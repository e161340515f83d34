"""Shared plumbing for SQLAlchemy repositories.

Repositories only read and stage rows. The unit of work that owns the
session decides when to commit or roll back.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from sessionauth.core.extensions import db

ModelT = TypeVar("ModelT")

SortColumns = Mapping[str, InstrumentedAttribute[Any]]


def apply_sorting(
    stmt: Select[Any],
    sortable_fields: SortColumns,
    field: str,
    *,
    descending: bool,
    pk_attr: InstrumentedAttribute[Any] | None,
) -> Select[Any]:
    """Order ``stmt`` by a whitelisted public field, then by primary key.

    Unknown ``field`` values add no column ordering, so caller input never
    reaches ``ORDER BY`` unchecked. The primary key keeps pages stable when
    the chosen column has ties.
    """
    column = sortable_fields.get(field)
    if column is not None:
        stmt = stmt.order_by(column.desc() if descending else column.asc())
    if pk_attr is not None:
        stmt = stmt.order_by(pk_attr.asc())
    return stmt


class BaseRepository(Generic[ModelT]):
    """Primary-key access for one mapped model.

    Subclasses set ``model`` and list their sortable columns in
    ``_sortable_fields``.
    """

    model: type[ModelT]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        # Outside a unit of work fall back to the request-scoped session
        return self._session if self._session is not None else cast(Session, db.session)

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _sortable_fields(self) -> SortColumns:
        return {}

    def add(self, instance: ModelT) -> ModelT:
        """Stage ``instance`` and flush so its primary key is assigned."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> ModelT | None:
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError(f"{type(self).__name__} has no 'id' column to look up")
        stmt = select(self.model).where(pk_attr == entity_id)
        return cast(ModelT | None, self.session.execute(stmt).scalars().first())

    def flush(self) -> None:
        self.session.flush()
