# sessionauth/infra/redis/redis_activation_token_store.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import redis  # type: ignore[import-untyped]

from sessionauth.services._shared.ports import (
    ActivationTokenRecord,
    ActivationTokenStore,
)

INDEX_KEY = "act:index"


def _b(s: bytes | None, default: str = "") -> str:
    return s.decode() if s is not None else default


def _ts(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp())


def _dt(raw: bytes | None) -> datetime | None:
    value = _b(raw)
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=UTC)


@dataclass(slots=True)
class RedisActivationTokenStore(ActivationTokenStore):
    """
    Redis-backed activation token store.

    Records live in ``act:{token}`` hashes and are indexed in ``act:index`` so
    that :meth:`purge` can find them. A record is kept for ``retention`` past
    its expiry: callers can then still tell an expired link from an unknown one.

    :param r: A Redis client (already connected).
    :param retention: Extra lifetime given to the Redis key after ``expires_at``.
    """

    r: redis.Redis
    retention: timedelta = timedelta(days=7)

    @staticmethod
    def _k(token: str) -> str:
        return f"act:{token}"

    def add(self, record: ActivationTokenRecord) -> None:
        key = self._k(record.token)
        deadline = _ts(record.expires_at) + int(self.retention.total_seconds())
        ttl = max(1, deadline - _ts(datetime.now(UTC)))

        mapping = {
            "user_id": record.user_id,
            "created_at": str(_ts(record.created_at)),
            "expires_at": str(_ts(record.expires_at)),
            "used_at": str(_ts(record.used_at)) if record.used_at else "",
        }
        pipe = self.r.pipeline(transaction=True)
        pipe.hset(key, mapping=mapping)
        pipe.expire(key, ttl)
        pipe.sadd(INDEX_KEY, record.token)
        pipe.execute()

    def get(self, token: str) -> ActivationTokenRecord | None:
        h = self.r.hgetall(self._k(token))
        if not h:
            return None
        return ActivationTokenRecord(
            token=token,
            user_id=_b(h.get(b"user_id")),
            created_at=_dt(h.get(b"created_at")) or datetime.fromtimestamp(0, tz=UTC),
            expires_at=_dt(h.get(b"expires_at")) or datetime.fromtimestamp(0, tz=UTC),
            used_at=_dt(h.get(b"used_at")),
        )

    def mark_used(self, token: str, *, used_at: datetime) -> bool:
        key = self._k(token)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    h = p.hgetall(key)
                    if not h or _b(h.get(b"used_at")):
                        p.unwatch()
                        return False
                    p.multi()
                    p.hset(key, "used_at", str(_ts(used_at)))
                    p.execute()
                return True
            except redis.WatchError:
                continue

    def purge(self, *, now: datetime) -> int:
        now_ts = _ts(now)
        removed = 0
        stale: list[str] = []
        for member in self.r.smembers(INDEX_KEY):
            token = _b(member)
            rec = self.get(token)
            if rec is None:
                stale.append(token)
                continue
            if rec.used_at is not None or _ts(rec.expires_at) < now_ts:
                self.r.delete(self._k(token))
                stale.append(token)
                removed += 1
        if stale:
            self.r.srem(INDEX_KEY, *stale)
        return removed
