from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, auto
from typing import Protocol


class ClaimResult(Enum):
    """Outcome of an atomic "revoke if still usable" attempt."""

    OK = auto()
    NOT_FOUND = auto()
    EXPIRED = auto()
    REVOKED = auto()


@dataclass(frozen=True)
class RefreshTokenRecord:
    """
    Persisted refresh token.

    :ivar jti: Unique opaque identifier embedded in the signed token.
    :ivar user_id: Owner user id.
    :ivar expires_at: Absolute expiration (UTC).
    :ivar created_at: Issuance time (UTC).
    :ivar revoked: Soft-revocation flag; records are never deleted by normal flow.
    """

    jti: str
    user_id: str
    expires_at: datetime
    created_at: datetime
    revoked: bool = False

    def is_valid(self, now: datetime) -> bool:
        return not self.revoked and now < self.expires_at


class RefreshTokenStore(Protocol):
    """
    Stateful store for refresh tokens.

    ``claim`` MUST be atomic: of two concurrent claims on the same usable
    ``jti`` exactly one returns ``ClaimResult.OK``.
    """

    def add(self, record: RefreshTokenRecord) -> None:
        """Persist a brand-new record. MUST run before the token is handed out."""

    def get(self, jti: str) -> RefreshTokenRecord | None:
        """Fetch a single record snapshot (if present)."""

    def claim(self, jti: str, *, now: datetime) -> ClaimResult:
        """Atomically revoke ``jti`` iff it exists, is not revoked and not expired."""

    def revoke(self, jti: str) -> bool:
        """Mark a single record as revoked. :returns: True if it existed."""

    def revoke_all_for_user(self, user_id: str) -> int:
        """
        Revoke every non-revoked record of ``user_id``.

        :returns: Number of records flipped to revoked.
        """

    def list_for_user(self, user_id: str) -> Iterable[RefreshTokenRecord]:
        """List the user's indexed records; claimed or bulk-revoked ones drop out."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store.

    .. note::
       A single lock serializes every mutation, which is what makes ``claim``
       atomic inside one process.
    """

    def __init__(self) -> None:
        self._by_jti: dict[str, RefreshTokenRecord] = {}
        self._by_user: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def add(self, record: RefreshTokenRecord) -> None:
        with self._lock:
            self._by_jti[record.jti] = record
            self._by_user.setdefault(record.user_id, set()).add(record.jti)

    def get(self, jti: str) -> RefreshTokenRecord | None:
        with self._lock:
            return self._by_jti.get(jti)

    def claim(self, jti: str, *, now: datetime) -> ClaimResult:
        with self._lock:
            rec = self._by_jti.get(jti)
            if rec is None:
                return ClaimResult.NOT_FOUND
            if rec.revoked:
                return ClaimResult.REVOKED
            if rec.expires_at <= now:
                return ClaimResult.EXPIRED
            self._by_jti[jti] = replace(rec, revoked=True)
            self._by_user.get(rec.user_id, set()).discard(jti)
            return ClaimResult.OK

    def revoke(self, jti: str) -> bool:
        with self._lock:
            rec = self._by_jti.get(jti)
            if rec is None:
                return False
            if not rec.revoked:
                self._by_jti[jti] = replace(rec, revoked=True)
            return True

    def revoke_all_for_user(self, user_id: str) -> int:
        with self._lock:
            flipped = 0
            for jti in self._by_user.pop(user_id, set()):
                rec = self._by_jti.get(jti)
                if rec is not None and not rec.revoked:
                    self._by_jti[jti] = replace(rec, revoked=True)
                    flipped += 1
            return flipped

    def list_for_user(self, user_id: str) -> Iterable[RefreshTokenRecord]:
        with self._lock:
            jtis = sorted(self._by_user.get(user_id, set()))
            records = [self._by_jti[j] for j in jtis if j in self._by_jti]
        yield from records
