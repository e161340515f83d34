"""
sessionauth.services._shared.ports
==================================

Collection of *ports* (hexagonal interfaces) that define the contracts
between the token core and its collaborators.

Modules
-------
- :mod:`clock`:
    :class:`~.Clock`: time source; :class:`~.SystemClock` and :class:`~.FrozenClock`.

- :mod:`token_codec`:
    :class:`~.TokenCodec`: signing/decoding of access and refresh tokens.

- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore`, :class:`~.RefreshTokenRecord` and
    :class:`~.ClaimResult`: refresh-token persistence with atomic claims.

- :mod:`activation_token_store`:
    :class:`~.ActivationTokenStore` and :class:`~.ActivationTokenRecord`.

- :mod:`user_directory`:
    :class:`~.UserDirectory`: live account status lookups.

- :mod:`notifier`:
    :class:`~.ActivationNotifier`: outbound activation links.

Design Notes
------------
Concrete adapters (Redis, SQLAlchemy, PyJWT, logging mailer) live under
``sessionauth.infra``. The in-memory implementations kept next to each port
are used by unit tests and by single-process development setups.
"""

from __future__ import annotations

from .activation_token_store import (
    ActivationTokenRecord,
    ActivationTokenStore,
    InMemoryActivationTokenStore,
)
from .clock import Clock, FrozenClock, SystemClock
from .notifier import ActivationNotifier, RecordingActivationNotifier
from .refresh_token_store import (
    ClaimResult,
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
)
from .token_codec import TokenCodec, TokenKind
from .user_directory import (
    AccountSnapshot,
    InMemoryUserDirectory,
    UserDirectory,
    UserStatus,
)

__all__ = [
    "AccountSnapshot",
    "ActivationNotifier",
    "ActivationTokenRecord",
    "ActivationTokenStore",
    "ClaimResult",
    "Clock",
    "FrozenClock",
    "InMemoryActivationTokenStore",
    "InMemoryRefreshTokenStore",
    "InMemoryUserDirectory",
    "RecordingActivationNotifier",
    "RefreshTokenRecord",
    "RefreshTokenStore",
    "SystemClock",
    "TokenCodec",
    "TokenKind",
    "UserDirectory",
    "UserStatus",
]
