"""Construction of the token core and its collaborators for one application."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import cast

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app

from sessionauth.core.extensions import REDIS_EXTENSION_KEY
from sessionauth.core.settings import AuthSettings
from sessionauth.infra.jwt.jwt_token_codec import JWTTokenCodec
from sessionauth.infra.mail.logging_notifier import LoggingActivationNotifier
from sessionauth.infra.redis.redis_activation_token_store import RedisActivationTokenStore
from sessionauth.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from sessionauth.infra.sql.user_directory import SqlUserDirectory
from sessionauth.services._shared.ports import (
    ActivationNotifier,
    ActivationTokenStore,
    Clock,
    InMemoryActivationTokenStore,
    InMemoryRefreshTokenStore,
    RefreshTokenStore,
    SystemClock,
    UserDirectory,
)
from sessionauth.services.accounts.service import AccountService
from sessionauth.services.activation.service import ActivationService
from sessionauth.services.admission.service import AdmissionService
from sessionauth.services.sessions.service import SessionManager
from sessionauth.services.tokens.service import TokenService

log = logging.getLogger(__name__)

EXTENSION_KEY = "auth"


@dataclass(slots=True)
class AuthComponents:
    """Every service of the token core, wired once per application."""

    settings: AuthSettings
    clock: Clock
    tokens: TokenService
    activation: ActivationService
    admission: AdmissionService
    sessions: SessionManager
    accounts: AccountService


def build_auth_components(
    settings: AuthSettings,
    *,
    refresh_store: RefreshTokenStore,
    activation_store: ActivationTokenStore,
    users: UserDirectory,
    notifier: ActivationNotifier,
    clock: Clock | None = None,
) -> AuthComponents:
    """
    Assemble the services around explicit collaborators.

    :param settings: Immutable auth settings built at startup.
    :param refresh_store: Refresh-token persistence.
    :param activation_store: Activation-token persistence.
    :param users: Live account lookups used by admission.
    :param notifier: Outbound activation links.
    :param clock: Time source shared by every service.
    :returns: The wired components.
    :rtype: AuthComponents
    """
    clock = clock or SystemClock()
    tokens = TokenService(
        settings=settings,
        codec=JWTTokenCodec.from_settings(settings),
        refresh_store=refresh_store,
        clock=clock,
    )
    activation = ActivationService(settings=settings, store=activation_store, clock=clock)
    sessions = SessionManager(tokens=tokens)
    return AuthComponents(
        settings=settings,
        clock=clock,
        tokens=tokens,
        activation=activation,
        admission=AdmissionService(tokens=tokens, users=users),
        sessions=sessions,
        accounts=AccountService(
            settings=settings,
            sessions=sessions,
            tokens=tokens,
            activation=activation,
            notifier=notifier,
        ),
    )


def init_app(app: Flask) -> None:
    """
    Build :class:`AuthComponents` from ``app.config`` and attach them.

    Uses the Redis client registered by :mod:`sessionauth.core.extensions` when
    present, in-process stores otherwise.

    :raises ConfigurationError: On missing or identical signing secrets.
    """
    settings = AuthSettings.from_mapping(app.config)
    client = cast(redis.Redis | None, app.extensions.get(REDIS_EXTENSION_KEY))

    refresh_store: RefreshTokenStore
    activation_store: ActivationTokenStore
    if client is not None:
        refresh_store = RedisRefreshTokenStore(r=client)
        activation_store = RedisActivationTokenStore(
            r=client, retention=settings.activation_retention
        )
    else:
        log.warning("auth.in_memory_stores reason=REDIS_URL unset")
        refresh_store = InMemoryRefreshTokenStore()
        activation_store = InMemoryActivationTokenStore()

    app.extensions[EXTENSION_KEY] = build_auth_components(
        settings,
        refresh_store=refresh_store,
        activation_store=activation_store,
        users=SqlUserDirectory(),
        notifier=LoggingActivationNotifier(),
    )


def get_auth() -> AuthComponents:
    """Return the components of the current application."""
    return cast(AuthComponents, current_app.extensions[EXTENSION_KEY])
