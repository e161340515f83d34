from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class ActivationTokenRecord:
    """
    Persisted single-use activation token.

    :ivar token: Opaque random value, acts as the primary key.
    :ivar user_id: User the token activates.
    :ivar expires_at: Absolute expiration (UTC).
    :ivar created_at: Issuance time (UTC).
    :ivar used_at: Set exactly once on successful activation.
    """

    token: str
    user_id: str
    expires_at: datetime
    created_at: datetime
    used_at: datetime | None = None


class ActivationTokenStore(Protocol):
    """Keyed store for activation tokens."""

    def add(self, record: ActivationTokenRecord) -> None: ...

    def get(self, token: str) -> ActivationTokenRecord | None: ...

    def mark_used(self, token: str, *, used_at: datetime) -> bool:
        """
        Set ``used_at`` only if it is currently unset (compare-and-set).

        :returns: ``True`` when this call performed the transition.
        """

    def purge(self, *, now: datetime) -> int:
        """Delete expired or used records. :returns: Number of records removed."""


class InMemoryActivationTokenStore(ActivationTokenStore):
    """Simple in-memory activation token store."""

    def __init__(self) -> None:
        self._by_token: dict[str, ActivationTokenRecord] = {}
        self._lock = threading.Lock()

    def add(self, record: ActivationTokenRecord) -> None:
        with self._lock:
            self._by_token[record.token] = record

    def get(self, token: str) -> ActivationTokenRecord | None:
        with self._lock:
            return self._by_token.get(token)

    def mark_used(self, token: str, *, used_at: datetime) -> bool:
        with self._lock:
            rec = self._by_token.get(token)
            if rec is None or rec.used_at is not None:
                return False
            self._by_token[token] = replace(rec, used_at=used_at)
            return True

    def purge(self, *, now: datetime) -> int:
        with self._lock:
            stale = [
                t
                for t, rec in self._by_token.items()
                if rec.used_at is not None or rec.expires_at < now
            ]
            for t in stale:
                del self._by_token[t]
            return len(stale)
