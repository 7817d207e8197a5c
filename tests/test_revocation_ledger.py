from __future__ import annotations

from datetime import timedelta

import pytest

from contacts_api.core.security import hash_token
from contacts_api.repositories import StoreError
from contacts_api.repositories.redis_repository import RedisRevocationRepository
from contacts_api.services.revocation_service import RevocationLedger

from conftest import FakeRedis


@pytest.fixture()
def fake_redis(clock):
    return FakeRedis(clock)


@pytest.fixture(params=["sql", "redis"])
def ledger(request, repo, fake_redis, clock):
    backend = repo if request.param == "sql" else RedisRevocationRepository(fake_redis)
    return RevocationLedger(backend, clock=clock)


def test_hash_is_deterministic_and_one_way():
    assert hash_token("abc") == hash_token("abc")
    assert hash_token("abc") != hash_token("abd")
    assert len(hash_token("abc")) == 64
    assert "abc" not in hash_token("abc")


def test_add_is_visible_immediately(ledger, clock):
    token_hash = ledger.add("raw-token", clock() + timedelta(minutes=5))

    assert token_hash == hash_token("raw-token")
    assert ledger.contains(token_hash)
    assert ledger.is_revoked("raw-token")
    assert not ledger.is_revoked("other-token")


def test_add_twice_is_idempotent(ledger, clock):
    expires_at = clock() + timedelta(minutes=5)
    first = ledger.add("raw-token", expires_at)
    second = ledger.add("raw-token", expires_at)

    assert first == second
    assert ledger.is_revoked("raw-token")


def test_entries_disappear_after_token_expiry(ledger, clock):
    ledger.add("raw-token", clock() + timedelta(seconds=90))

    clock.advance(89)
    assert ledger.is_revoked("raw-token")
    clock.advance(2)
    assert not ledger.is_revoked("raw-token")


def test_remaining_ttl_ends_after_expiry_and_never_drops_below_one(clock):
    ledger = RevocationLedger(RedisRevocationRepository(FakeRedis(clock)), clock=clock)

    assert ledger.remaining_ttl(clock() + timedelta(seconds=10, milliseconds=200)) == 11
    assert ledger.remaining_ttl(clock() - timedelta(seconds=5)) == 1
    assert ledger.remaining_ttl((clock() + timedelta(seconds=30)).replace(tzinfo=None)) == 31


def test_redis_entries_use_blacklist_key_and_token_ttl(fake_redis, clock):
    ledger = RevocationLedger(RedisRevocationRepository(fake_redis), clock=clock)
    ledger.add("raw-token", clock() + timedelta(seconds=300))

    key = f"blacklist:jwt:{hash_token('raw-token')}"
    assert fake_redis.get(key) == "true"
    assert fake_redis.ttls[key] == 301


def test_sql_add_purges_expired_rows(repo, clock):
    ledger = RevocationLedger(repo, clock=clock)
    ledger.add("old-token", clock() + timedelta(seconds=10))
    clock.advance(20)

    ledger.add("new-token", clock() + timedelta(seconds=10))

    assert repo.purge_expired() == 0
    assert ledger.is_revoked("new-token")
    assert not ledger.is_revoked("old-token")


def test_entry_still_held_at_the_exact_expiry_instant(ledger, clock):
    expires_at = clock() + timedelta(seconds=90)
    ledger.add("raw-token", expires_at)

    clock.now = expires_at
    assert ledger.is_revoked("raw-token")
    clock.advance(1)
    assert not ledger.is_revoked("raw-token")


def test_sql_purge_keeps_rows_expiring_now(repo, clock):
    ledger = RevocationLedger(repo, clock=clock)
    expires_at = clock() + timedelta(seconds=10)
    ledger.add("raw-token", expires_at)

    clock.now = expires_at
    assert repo.purge_expired() == 0
    clock.advance(1)
    assert repo.purge_expired() == 1


class _PurgeFailingRepository:
    def __init__(self, inner):
        self.inner = inner

    def revoke(self, token_hash, expires_at, ttl_seconds):
        self.inner.revoke(token_hash, expires_at, ttl_seconds)

    def is_revoked(self, token_hash):
        return self.inner.is_revoked(token_hash)

    def purge_expired(self):
        raise StoreError("OperationalError during SQL operation")


def test_purge_failure_does_not_undo_revocation(repo, clock):
    ledger = RevocationLedger(_PurgeFailingRepository(repo), clock=clock)

    token_hash = ledger.add("raw-token", clock() + timedelta(minutes=5))

    assert token_hash == hash_token("raw-token")
    assert ledger.is_revoked("raw-token")
