"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import logging

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

log = logging.getLogger(__name__)

# Constraint names stay stable across SQLite and PostgreSQL migrations
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
limiter = Limiter(key_func=get_remote_address)
redis_client: redis.Redis | None = None

REDIS_EXTENSION_KEY = "redis_client"


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, rate limiting and Redis.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`sessionauth.models` package so SQLAlchemy metadata is ready for
        ``flask db migrate``.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from sessionauth import models as _models  # noqa: F401

    migrate.init_app(app, db)
    limiter.init_app(app)

    global redis_client
    redis_client = connect_redis(app)
    if redis_client is None:
        app.extensions.pop(REDIS_EXTENSION_KEY, None)
    else:
        app.extensions[REDIS_EXTENSION_KEY] = redis_client


def connect_redis(app: Flask) -> redis.Redis | None:
    """Open and ping the credential store named by ``REDIS_URL``.

    Returns
    -------
    redis.Redis | None
        The connected client, or ``None`` when ``REDIS_URL`` is unset.

    Raises
    ------
    RuntimeError
        When Redis is configured but unreachable at startup.
    """
    url = app.config.get("REDIS_URL")
    if not url:
        return None

    client = redis.Redis.from_url(
        url,
        socket_timeout=app.config.get("REDIS_SOCKET_TIMEOUT", 2.0),
        health_check_interval=app.config.get("REDIS_HEALTH_CHECK_INTERVAL", 30),
    )
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {url!r}") from exc
    log.info("extensions.redis_connected")
    return client

