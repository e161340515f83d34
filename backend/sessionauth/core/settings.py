"""Immutable token-core settings built once from the Flask config."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from sessionauth.core.durations import parse_duration
from sessionauth.services._shared.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Secrets and lifetimes consumed by the token and activation services.

    :ivar access_secret: Key signing access tokens.
    :ivar refresh_secret: Key signing refresh tokens (distinct from access).
    :ivar algorithm: JWT HMAC algorithm.
    :ivar access_ttl: Access token lifetime.
    :ivar refresh_ttl: Refresh token lifetime.
    :ivar activation_ttl: Activation token lifetime.
    :ivar activation_retention: Grace period before used/expired activation
        records may be dropped by the store.
    :ivar backend_url: Public base URL for activation links.
    :ivar frontend_activation_url: Landing page for activation redirects.
    """

    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=30)
    refresh_ttl: timedelta = timedelta(days=7)
    activation_ttl: timedelta = timedelta(hours=24)
    activation_retention: timedelta = timedelta(days=7)
    backend_url: str = "http://localhost:3000"
    frontend_activation_url: str = "http://localhost:3000"

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ConfigurationError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must be set.")
        if self.access_secret == self.refresh_secret:
            raise ConfigurationError("Access and refresh tokens must use distinct secrets.")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthSettings:
        """
        Build settings from a Flask-style config mapping.

        :param config: Usually ``app.config``.
        :returns: Frozen settings.
        :raises ConfigurationError: When signing secrets are missing or shared.
        """
        return cls(
            access_secret=str(config.get("JWT_ACCESS_SECRET") or ""),
            refresh_secret=str(config.get("JWT_REFRESH_SECRET") or ""),
            algorithm=str(config.get("JWT_ALGORITHM", "HS256")),
            access_ttl=parse_duration(config.get("ACCESS_EXPIRES_IN", "30m")),
            refresh_ttl=parse_duration(config.get("REFRESH_EXPIRES_IN", "7d")),
            activation_ttl=parse_duration(config.get("ACTIVATION_EXPIRES_IN", "24h")),
            activation_retention=parse_duration(config.get("ACTIVATION_RETENTION", "7d")),
            backend_url=str(config.get("BACKEND_URL", "http://localhost:3000")).rstrip("/"),
            frontend_activation_url=str(
                config.get("FRONTEND_ACTIVATION_URL", "http://localhost:3000")
            ).rstrip("/"),
        )
