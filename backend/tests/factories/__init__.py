"""Factory Boy base bound to the session handed out by the ``session`` fixture."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Holder for the test session; ``None`` outside the ``session`` fixture."""

    current = None

    @classmethod
    def set(cls, session) -> None:
        cls.current = session

    @classmethod
    def get(cls):
        if cls.current is None:
            raise RuntimeError("UserFactory needs the 'session' fixture to persist users")
        return cls.current


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Persist every built model with a commit so services can read it back."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "commit"
