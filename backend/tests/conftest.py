"""Pytest fixtures for the token core and the Flask application.

Pure unit tests get in-memory collaborators and a frozen clock. Tests that
touch the database get a fresh application bound to an in-memory SQLite
database whose tables are created and dropped around each case.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime

import fakeredis
import pytest
from sessionauth.core.auth import build_auth_components
from sessionauth.core.config import TestingConfig
from sessionauth.core.extensions import db as _db
from sessionauth.core.settings import AuthSettings
from sessionauth.factory import create_app
from sessionauth.infra.jwt.jwt_token_codec import JWTTokenCodec
from sessionauth.services._shared.ports import (
    FrozenClock,
    InMemoryActivationTokenStore,
    InMemoryRefreshTokenStore,
    InMemoryUserDirectory,
    RecordingActivationNotifier,
)
from sessionauth.services.activation.service import ActivationService
from sessionauth.services.admission.service import AdmissionService
from sessionauth.services.sessions.service import SessionManager
from sessionauth.services.tokens.service import TokenService

FROZEN_AT = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


# ------------------------------ Token core -------------------------------- #
@pytest.fixture()
def auth_settings() -> AuthSettings:
    """Short, explicit lifetimes so expiry arithmetic stays readable."""
    return AuthSettings(
        access_secret="unit-access-secret",
        refresh_secret="unit-refresh-secret",
        backend_url="http://api.test",
        frontend_activation_url="http://front.test",
    )


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(FROZEN_AT)


@pytest.fixture()
def codec(auth_settings) -> JWTTokenCodec:
    return JWTTokenCodec.from_settings(auth_settings)


@pytest.fixture()
def refresh_store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


@pytest.fixture()
def activation_store() -> InMemoryActivationTokenStore:
    return InMemoryActivationTokenStore()


@pytest.fixture()
def token_service(auth_settings, codec, refresh_store, clock) -> TokenService:
    return TokenService(
        settings=auth_settings, codec=codec, refresh_store=refresh_store, clock=clock
    )


@pytest.fixture()
def activation_service(auth_settings, activation_store, clock) -> ActivationService:
    return ActivationService(settings=auth_settings, store=activation_store, clock=clock)


@pytest.fixture()
def user_directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture()
def admission(token_service, user_directory) -> AdmissionService:
    return AdmissionService(tokens=token_service, users=user_directory)


@pytest.fixture()
def sessions(token_service) -> SessionManager:
    return SessionManager(tokens=token_service)


@pytest.fixture()
def notifier() -> RecordingActivationNotifier:
    return RecordingActivationNotifier()


@pytest.fixture()
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


# ------------------------------ Application ------------------------------- #
@pytest.fixture()
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("REDIS_URL", None)
    app = create_app(TestingConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture()
def db(app):
    """Create the schema for one test and drop it afterwards.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application. The application
        context stays pushed for the whole test, so requests issued through
        the test client share its session.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(db):
    """Expose the scoped session and wire Factory Boy to it."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(db.session)
    try:
        yield db.session
    finally:
        SQLAlchemySession.set(None)


@pytest.fixture()
def client(app, session):
    return app.test_client()


@pytest.fixture()
def auth(app, session):
    """Token core components wired into the application under test."""
    return app.extensions["auth"]


@pytest.fixture()
def components(session, auth_settings, clock, notifier):
    """Components on the real database with a frozen clock and recorded mail."""
    return build_auth_components(
        auth_settings,
        refresh_store=InMemoryRefreshTokenStore(),
        activation_store=InMemoryActivationTokenStore(),
        users=InMemoryUserDirectory(),
        notifier=notifier,
        clock=clock,
    )


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk
