# sessionauth/services/activation/service.py
from __future__ import annotations

import logging
import secrets
from collections.abc import Callable

from sessionauth.core.settings import AuthSettings
from sessionauth.services._shared.ports import (
    ActivationTokenRecord,
    ActivationTokenStore,
    Clock,
    SystemClock,
)
from sessionauth.services.activation.dto import ActivationCheck, ActivationFailure

log = logging.getLogger(__name__)


def _new_token() -> str:
    return secrets.token_urlsafe(32)


class ActivationService:
    """
    Single-use email activation tokens.

    A token is valid iff it exists, ``used_at`` is unset and ``now < expires_at``.
    Several pending tokens per user are allowed; each one is checked on its own.
    """

    def __init__(
        self,
        *,
        settings: AuthSettings,
        store: ActivationTokenStore,
        clock: Clock | None = None,
        token_factory: Callable[[], str] = _new_token,
    ) -> None:
        self.settings = settings
        self.store = store
        self.clock = clock or SystemClock()
        self._new_token = token_factory

    def issue(self, user_id: int | str) -> str:
        """
        Persist a new activation token for ``user_id``.

        :returns: The opaque token to embed in the activation link.
        :rtype: str
        """
        now = self.clock.now()
        token = self._new_token()
        self.store.add(
            ActivationTokenRecord(
                token=token,
                user_id=str(user_id),
                expires_at=now + self.settings.activation_ttl,
                created_at=now,
            )
        )
        return token

    def verify(self, token: str) -> ActivationCheck:
        """
        Classify ``token`` without changing it.

        Priority: unknown, then already used, then expired.
        """
        rec = self.store.get(token) if token else None
        if rec is None:
            return ActivationCheck.rejected(ActivationFailure.NOT_FOUND)
        if rec.used_at is not None:
            return ActivationCheck.rejected(ActivationFailure.ALREADY_USED)
        if self.clock.now() >= rec.expires_at:
            return ActivationCheck.rejected(ActivationFailure.EXPIRED)
        return ActivationCheck.ok(rec.user_id)

    def consume(self, token: str) -> None:
        """
        Stamp ``used_at`` on a token that passed :meth:`verify`.

        :raises TokenNotFoundError: The token does not exist.
        :raises TokenAlreadyUsedError: Another caller consumed it first.
        """
        if self.store.mark_used(token, used_at=self.clock.now()):
            log.info("activation.consumed")
            return
        failure = (
            ActivationFailure.NOT_FOUND
            if self.store.get(token) is None
            else ActivationFailure.ALREADY_USED
        )
        raise failure.to_error()

    def purge_expired(self) -> int:
        """Housekeeping: drop used or expired records. :returns: Count removed."""
        removed = self.store.purge(now=self.clock.now())
        log.info("activation.purged count=%s", removed)
        return removed
