"""
Unit tests for RedisRefreshTokenStore using fakeredis.

These tests exercise the main flows:
- add + get
- claim (success, replay, expiry, unknown jti, concurrent claimants)
- revoke and revoke_all_for_user
- list_for_user cleanup
- the per-user index stays bounded and revocation never resurrects records

Times are relative to the real clock because key TTLs are computed from it.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta

import pytest
from sessionauth.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from sessionauth.services._shared.ports import ClaimResult, RefreshTokenRecord


def _now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


def _record(jti: str, user_id: str = "user-1", *, ttl: int = 300) -> RefreshTokenRecord:
    now = _now()
    return RefreshTokenRecord(
        jti=jti,
        user_id=user_id,
        created_at=now,
        expires_at=now + timedelta(seconds=ttl),
    )


@pytest.fixture
def store(fake_redis):
    """Provide a RedisRefreshTokenStore backed by FakeRedis."""
    return RedisRefreshTokenStore(r=fake_redis)


def test_add_and_get(store, fake_redis):
    rec = _record("jti-1")
    store.add(rec)

    view = store.get("jti-1")
    assert view is not None
    assert view.user_id == "user-1"
    assert view.revoked is False
    assert int(view.expires_at.timestamp()) == int(rec.expires_at.timestamp())
    assert 0 < fake_redis.ttl("rt:jti-1") <= 300
    assert fake_redis.sismember("rt:u:user-1", "jti-1")


def test_get_unknown_returns_none(store):
    assert store.get("missing") is None


def test_claim_succeeds_once(store):
    store.add(_record("jti-1"))

    assert store.claim("jti-1", now=_now()) is ClaimResult.OK
    assert store.claim("jti-1", now=_now()) is ClaimResult.REVOKED
    assert store.get("jti-1").revoked is True


def test_claim_unknown_and_expired(store):
    store.add(_record("jti-1", ttl=60))

    assert store.claim("nope", now=_now()) is ClaimResult.NOT_FOUND
    later = _now() + timedelta(seconds=120)
    assert store.claim("jti-1", now=later) is ClaimResult.EXPIRED
    assert store.get("jti-1").revoked is False


def test_concurrent_claims_have_a_single_winner(store):
    """Two threads claiming the same jti: exactly one sees ``OK``."""
    store.add(_record("jti-race"))
    barrier = threading.Barrier(2)
    results: list[ClaimResult] = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        outcome = store.claim("jti-race", now=_now())
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert sorted(r.name for r in results) == ["OK", "REVOKED"]


def test_revoke_is_idempotent(store):
    store.add(_record("jti-1"))

    assert store.revoke("jti-1") is True
    assert store.revoke("jti-1") is True
    assert store.get("jti-1").revoked is True
    assert store.revoke("unknown") is False


def test_revoke_all_for_user_counts_only_live_records(store):
    store.add(_record("a1", "alice"))
    store.add(_record("a2", "alice"))
    store.add(_record("a3", "alice"))
    store.add(_record("b1", "bob"))
    store.revoke("a3")

    assert store.revoke_all_for_user("alice") == 2
    assert store.get("a1").revoked and store.get("a2").revoked
    assert list(store.list_for_user("alice")) == []
    assert store.get("b1").revoked is False
    assert store.revoke_all_for_user("alice") == 0
    assert store.revoke_all_for_user("nobody") == 0


def test_list_for_user_drops_stale_index_entries(store, fake_redis):
    store.add(_record("a1", "alice"))
    store.add(_record("a2", "alice"))
    fake_redis.delete("rt:a2")

    jtis = [rec.jti for rec in store.list_for_user("alice")]

    assert jtis == ["a1"]
    assert not fake_redis.sismember("rt:u:alice", "a2")


def test_user_index_stays_bounded_across_rotations(store, fake_redis):
    current = "r0"
    store.add(_record(current, "alice"))
    for i in range(1, 51):
        assert store.claim(current, now=_now()) is ClaimResult.OK
        current = f"r{i}"
        store.add(_record(current, "alice"))

    assert fake_redis.smembers("rt:u:alice") == {b"r50"}
    assert 0 < fake_redis.ttl("rt:u:alice") <= 300


def test_user_index_expires_with_its_longest_lived_member(store, fake_redis):
    store.add(_record("long", "alice", ttl=600))
    store.add(_record("short", "alice", ttl=60))

    assert 300 < fake_redis.ttl("rt:u:alice") <= 600


def test_revoke_all_empties_the_index(store, fake_redis):
    store.add(_record("a1", "alice"))
    store.add(_record("a2", "alice"))
    store.add(_record("a3", "alice"))
    fake_redis.delete("rt:a2")
    store.revoke("a3")

    assert store.revoke_all_for_user("alice") == 1
    assert fake_redis.scard("rt:u:alice") == 0

    store.add(_record("a4", "alice"))
    assert fake_redis.smembers("rt:u:alice") == {b"a4"}


def test_revocation_never_recreates_an_expired_record(store, fake_redis):
    store.add(_record("a1", "alice"))
    fake_redis.delete("rt:a1")

    assert store.revoke("a1") is False
    assert store.revoke_all_for_user("alice") == 0
    assert not fake_redis.exists("rt:a1")


def test_revocation_keeps_the_record_ttl(store, fake_redis):
    store.add(_record("a1", "alice"))
    store.add(_record("a2", "alice"))

    store.revoke("a1")
    store.revoke_all_for_user("alice")

    for key in ("rt:a1", "rt:a2"):
        assert 0 < fake_redis.ttl(key) <= 300
    assert store.get("a2").revoked is True
