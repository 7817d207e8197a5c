from __future__ import annotations

import jwt
import pytest

from contacts_api.domain.results import Err, ErrorKind, Identity, Ok
from contacts_api.repositories import StoreError
from contacts_api.repositories.redis_repository import RedisRevocationRepository
from contacts_api.services.auth_service import AuthService
from contacts_api.services.credential_service import CredentialStore
from contacts_api.services.revocation_service import RevocationLedger
from contacts_api.services.token_service import TokenIssuer, TokenValidator

from conftest import TEST_SECRET, FakeRedis


@pytest.fixture()
def ledger(repo, clock):
    return RevocationLedger(repo, clock=clock)


@pytest.fixture()
def issuer(clock):
    return TokenIssuer(TEST_SECRET, ttl_seconds=600, clock=clock)


@pytest.fixture()
def validator(ledger, clock):
    return TokenValidator(TEST_SECRET, ledger, clock=clock)


def test_validate_returns_embedded_subject(issuer, validator):
    token_a = issuer.issue(1)
    token_b = issuer.issue(2)

    assert validator.validate(token_a.raw) == Ok(Identity(user_id=1))
    assert validator.validate(token_b.raw) == Ok(Identity(user_id=2))


def test_tokens_issued_in_same_second_differ(issuer, validator):
    first = issuer.issue(1)
    second = issuer.issue(1)

    assert first.raw != second.raw
    assert isinstance(validator.validate(first.raw), Ok)
    assert isinstance(validator.validate(second.raw), Ok)


def test_expiry_horizon_is_fixed_from_issuance(issuer, clock):
    token = issuer.issue(7)
    assert (token.expires_at - token.issued_at).total_seconds() == 600
    assert token.issued_at == clock().replace(microsecond=0)


@pytest.mark.parametrize("raw", ["", None, "not-a-jwt", "a.b.c"])
def test_unparseable_tokens_are_malformed(validator, raw):
    outcome = validator.validate(raw)
    assert isinstance(outcome, Err)
    assert outcome.kind is ErrorKind.TOKEN_MALFORMED


def test_tampered_claims_break_signature(issuer, validator):
    token = issuer.issue(1)
    header, payload, signature = token.raw.split(".")
    forged_payload = jwt.encode(
        {"sub": "2", "iat": 0, "exp": 9999999999, "jti": "x"}, "other-secret-key-0123456789-abcdefgh"
    ).split(".")[1]

    outcome = validator.validate(f"{header}.{forged_payload}.{signature}")
    assert outcome == Err(ErrorKind.TOKEN_MALFORMED)


def test_token_signed_with_other_secret_is_malformed(validator, clock):
    foreign = TokenIssuer("another-secret-key-for-tests-0123456789", clock=clock).issue(1)
    assert validator.validate(foreign.raw) == Err(ErrorKind.TOKEN_MALFORMED)


def test_missing_claims_are_malformed(validator):
    raw = jwt.encode({"sub": "1"}, TEST_SECRET, algorithm="HS256")
    assert validator.validate(raw) == Err(ErrorKind.TOKEN_MALFORMED)


def test_non_numeric_subject_is_malformed(validator, clock):
    now = int(clock().timestamp())
    raw = jwt.encode({"sub": "alice", "iat": now, "exp": now + 60, "jti": "j"}, TEST_SECRET, algorithm="HS256")
    assert validator.validate(raw) == Err(ErrorKind.TOKEN_MALFORMED)


def test_token_expires_strictly_after_exp(issuer, validator, clock):
    token = issuer.issue(1)

    clock.advance(600)
    assert isinstance(validator.validate(token.raw), Ok)

    clock.advance(1)
    assert validator.validate(token.raw) == Err(ErrorKind.TOKEN_EXPIRED)


def test_revoked_token_fails_although_signature_is_valid(issuer, validator, ledger):
    token = issuer.issue(1)
    other = issuer.issue(1)
    ledger.add(token.raw, token.expires_at)

    assert validator.validate(token.raw) == Err(ErrorKind.TOKEN_REVOKED)
    assert validator.validate(token.raw) == Err(ErrorKind.TOKEN_REVOKED)
    assert isinstance(validator.validate(other.raw), Ok)


def test_expiry_is_reported_before_revocation(issuer, validator, ledger, clock):
    token = issuer.issue(1)
    ledger.add(token.raw, token.expires_at)

    clock.advance(601)
    assert validator.validate(token.raw) == Err(ErrorKind.TOKEN_EXPIRED)


def test_failure_kinds_are_unauthenticated():
    for kind in (ErrorKind.TOKEN_MALFORMED, ErrorKind.TOKEN_EXPIRED, ErrorKind.TOKEN_REVOKED):
        assert kind.is_unauthenticated
    assert not ErrorKind.RESOURCE_NOT_FOUND.is_unauthenticated


class _UnavailableLedgerRepo:
    def revoke(self, token_hash, expires_at, ttl_seconds):
        raise StoreError("ConnectionError")

    def is_revoked(self, token_hash):
        raise StoreError("ConnectionError")

    def purge_expired(self):
        return 0


def test_ledger_outage_is_not_treated_as_valid(issuer, clock):
    validator = TokenValidator(TEST_SECRET, RevocationLedger(_UnavailableLedgerRepo(), clock=clock), clock=clock)
    token = issuer.issue(1)

    assert validator.validate(token.raw) == Err(ErrorKind.INTERNAL)


@pytest.mark.parametrize("backend", ["sql", "redis"])
def test_revoked_token_stays_rejected_at_its_expiry_instant(backend, issuer, repo, clock):
    store = repo if backend == "sql" else RedisRevocationRepository(FakeRedis(clock))
    ledger = RevocationLedger(store, clock=clock)
    validator = TokenValidator(TEST_SECRET, ledger, clock=clock)
    token = issuer.issue(1)
    ledger.add(token.raw, token.expires_at)

    clock.now = token.expires_at
    assert validator.validate(token.raw) == Err(ErrorKind.TOKEN_REVOKED)

    clock.advance(1)
    assert validator.validate(token.raw) == Err(ErrorKind.TOKEN_EXPIRED)


class _PurgeFailingRepo:
    def __init__(self, inner):
        self.inner = inner

    def revoke(self, token_hash, expires_at, ttl_seconds):
        self.inner.revoke(token_hash, expires_at, ttl_seconds)

    def is_revoked(self, token_hash):
        return self.inner.is_revoked(token_hash)

    def purge_expired(self):
        raise StoreError("OperationalError during SQL operation")


def test_logout_succeeds_when_only_the_purge_fails(issuer, repo, clock):
    ledger = RevocationLedger(_PurgeFailingRepo(repo), clock=clock)
    validator = TokenValidator(TEST_SECRET, ledger, clock=clock)
    auth = AuthService(CredentialStore(repo), issuer, validator, ledger)
    token = issuer.issue(1)

    assert auth.logout(token.raw) == Ok(None)
    assert validator.validate(token.raw) == Err(ErrorKind.TOKEN_REVOKED)
