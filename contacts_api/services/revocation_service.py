"""Ledger of session tokens invalidated before their natural expiry."""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Callable

from contacts_api.core.logging import get_logger
from contacts_api.core.security import hash_token
from contacts_api.repositories import RevocationRepository, StoreError

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RevocationLedger:
    """TTL-bounded record of revoked token fingerprints.

    Entries outlive the token they revoke by less than a second, so the ledger
    never holds more than the currently-valid-but-revoked tokens.
    """

    def __init__(self, repository: RevocationRepository, clock: Callable[[], datetime] | None = None) -> None:
        self.repository = repository
        self._clock = clock or _utcnow

    def remaining_ttl(self, expires_at: datetime) -> int:
        """Whole seconds until the entry may lapse, always ending strictly after ``expires_at``."""
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        remaining = (expires_at - self._clock()).total_seconds()
        return max(1, math.floor(remaining) + 1)

    def add(self, raw_token: str, expires_at: datetime) -> str:
        """Record ``raw_token`` as revoked until ``expires_at``; adding twice is a no-op."""
        token_hash = hash_token(raw_token)
        self.repository.revoke(token_hash, expires_at, self.remaining_ttl(expires_at))
        try:
            purged = self.repository.purge_expired()
        except StoreError as exc:
            logger.warning("revocation_purge_failed", error=str(exc))
        else:
            if purged:
                logger.debug("revocations_purged", count=purged)
        return token_hash

    def contains(self, token_hash: str) -> bool:
        return self.repository.is_revoked(token_hash)

    def is_revoked(self, raw_token: str) -> bool:
        return self.contains(hash_token(raw_token))
