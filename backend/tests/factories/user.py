"""Factory Boy definition for :class:`sessionauth.models.user.User`."""

from __future__ import annotations

import factory
from sessionauth.models.user import User
from sessionauth.services._shared.ports import UserStatus
from werkzeug.security import generate_password_hash

from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"


class UserFactory(BaseFactory):
    """
    Build persisted :class:`User` instances.

    Notes
    -----
    - Accounts are ``ACTIVE`` unless ``status`` is given.
    - Pass ``password="..."`` to choose the plain text; only its hash is stored.
    """

    class Meta:
        model = User

    class Params:
        password = DEFAULT_PASSWORD

    id = None  # let autoincrement handle it
    name = factory.Faker("name")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    status = UserStatus.ACTIVE
    password_hash = factory.LazyAttribute(lambda o: generate_password_hash(o.password))
