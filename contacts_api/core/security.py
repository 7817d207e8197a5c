"""Security helpers (password hashing and token fingerprints)."""

from __future__ import annotations

import hashlib

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_PREFIX = "argon2$"
# Verified against when the username is unknown so both failure paths cost the same.
_DUMMY_HASH = _PREFIX + _ph.hash("contacts-api-dummy-password")


def hash_password(password: str) -> str:
    """Create a salted Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if not stored.startswith(_PREFIX):
        return False
    hashed = stored[len(_PREFIX) :]
    try:
        return _ph.verify(hashed, password)
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False


def burn_password_check(password: str) -> None:
    """Spend one Argon2 verification on a throwaway hash."""
    verify_password(password, _DUMMY_HASH)


def hash_token(raw_token: str) -> str:
    """Deterministic one-way fingerprint of a raw session token (sha256 hex)."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()
