# sessionauth/infra/redis/redis_refresh_token_store.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]

from sessionauth.services._shared.ports import (
    ClaimResult,
    RefreshTokenRecord,
    RefreshTokenStore,
)


def _b(s: bytes | None, default: str = "") -> str:
    return s.decode() if s is not None else default


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store with an atomic claim.

    Layout:

    - ``rt:{jti}``: hash with ``user_id``, ``created_at``, ``expires_at``, ``revoked``.
    - ``rt:u:{user_id}``: set of the user's unclaimed jtis; it expires with its
      longest-lived member and drops a jti once it is claimed or revoked in bulk.

    Each hash carries a TTL matching its expiry, so Redis drops dead records on
    its own; the ``expires_at`` field stays authoritative for validity checks.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(jti: str) -> str:
        return f"rt:{jti}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        # naive -> label as UTC (no conversion)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return int(dt.timestamp())

    def _record(self, jti: str, h: dict[bytes, bytes]) -> RefreshTokenRecord:
        return RefreshTokenRecord(
            jti=jti,
            user_id=_b(h.get(b"user_id")),
            created_at=datetime.fromtimestamp(int(_b(h.get(b"created_at"), "0")), tz=UTC),
            expires_at=datetime.fromtimestamp(int(_b(h.get(b"expires_at"), "0")), tz=UTC),
            revoked=_b(h.get(b"revoked"), "0") == "1",
        )

    # -------------------- API ------------------------

    def add(self, record: RefreshTokenRecord) -> None:
        """
        Insert the refresh record *before* the JWT is handed to the client.

        This ensures there is no timing window where the JWT exists without a
        server-side record. The user index is kept alive at least as long as
        its longest-lived member.
        """
        key = self._k(record.jti)
        key_u = self._ku(record.user_id)
        ttl = max(1, self._to_ts(record.expires_at) - self._to_ts(datetime.now(UTC)))
        # -1 (no TTL) and -2 (missing) both lose to any real TTL
        index_ttl = max(ttl, self.r.ttl(key_u))

        pipe = self.r.pipeline(transaction=True)
        pipe.hset(
            key,
            mapping={
                "user_id": record.user_id,
                "created_at": str(self._to_ts(record.created_at)),
                "expires_at": str(self._to_ts(record.expires_at)),
                "revoked": "1" if record.revoked else "0",
            },
        )
        pipe.expire(key, ttl)
        pipe.sadd(key_u, record.jti)
        pipe.expire(key_u, index_ttl)
        pipe.execute()

    def get(self, jti: str) -> RefreshTokenRecord | None:
        h = self.r.hgetall(self._k(jti))
        if not h:
            return None
        return self._record(jti, h)

    def claim(self, jti: str, *, now: datetime) -> ClaimResult:
        """
        Atomically revoke ``jti`` if it is still usable.

        Uses WATCH/MULTI/EXEC (optimistic locking): if another client touches
        the hash between the read and the write, EXEC fails and the whole check
        is replayed against the fresh state, so only one claimant sees ``OK``.
        A claimed jti can never be used again, so it leaves the user index in
        the same transaction.
        """
        key = self._k(jti)
        now_ts = self._to_ts(now)

        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    h = p.hgetall(key)
                    if not h:
                        p.unwatch()
                        return ClaimResult.NOT_FOUND
                    if _b(h.get(b"revoked"), "0") == "1":
                        p.unwatch()
                        return ClaimResult.REVOKED
                    if int(_b(h.get(b"expires_at"), "0")) <= now_ts:
                        p.unwatch()
                        return ClaimResult.EXPIRED

                    p.multi()
                    p.hset(key, "revoked", "1")
                    p.srem(self._ku(_b(h.get(b"user_id"))), jti)
                    p.execute()
                return ClaimResult.OK
            except redis.WatchError:
                # Concurrent modification detected; re-evaluate
                continue

    def _flag_revoked(self, keys: list[str]) -> int:
        """
        Set ``revoked`` on every hash in ``keys`` that is present and live.

        Runs under WATCH and re-applies each hash's remaining TTL with the
        write, so a record expiring mid-way is never recreated as a partial
        hash without expiry.

        :returns: Number of records flipped to revoked.
        """
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(*keys)
                    live: list[tuple[str, int]] = []
                    for key in keys:
                        if p.hget(key, "revoked") == b"0":
                            live.append((key, p.pttl(key)))
                    if not live:
                        p.unwatch()
                        return 0

                    p.multi()
                    for key, ttl_ms in live:
                        p.hset(key, "revoked", "1")
                        if ttl_ms > 0:
                            p.pexpire(key, ttl_ms)
                    p.execute()
                return len(live)
            except redis.WatchError:
                continue

    def revoke(self, jti: str) -> bool:
        key = self._k(jti)
        if not self.r.exists(key):
            return False
        self._flag_revoked([key])
        return True

    def revoke_all_for_user(self, user_id: str) -> int:
        key_u = self._ku(user_id)
        jtis = sorted(_b(m) for m in self.r.smembers(key_u))
        if not jtis:
            return 0

        flipped = self._flag_revoked([self._k(j) for j in jtis])
        # Every listed jti is now revoked or gone; jtis added meanwhile stay
        self.r.srem(key_u, *jtis)
        return flipped

    def list_for_user(self, user_id: str) -> Iterable[RefreshTokenRecord]:
        """Yield the indexed records of ``user_id``, pruning expired entries."""
        key_u = self._ku(user_id)
        members = sorted(_b(j) for j in self.r.smembers(key_u))

        stale: list[str] = []
        for j in members:
            rec = self.get(j)
            if rec:
                yield rec
            else:
                # Underlying hash expired -> drop from the index
                stale.append(j)

        if stale:
            self.r.srem(key_u, *stale)
