"""Redis-backed revocation entries (expiry handled by Redis TTLs)."""
from __future__ import annotations

from datetime import datetime

from redis import Redis
from redis.exceptions import RedisError

from .errors import StoreError

KEY_PREFIX = "blacklist:jwt:"


class RedisRevocationRepository:
    """Stores ``blacklist:jwt:<hash> = "true"`` with an EX matching the token lifetime."""

    def __init__(self, client: Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, redis_url: str, *, socket_timeout: float = 5.0) -> "RedisRevocationRepository":
        client = Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    @staticmethod
    def key_for(token_hash: str) -> str:
        return f"{KEY_PREFIX}{token_hash}"

    def revoke(self, token_hash: str, expires_at: datetime, ttl_seconds: int) -> None:
        try:
            self.client.set(self.key_for(token_hash), "true", ex=max(1, int(ttl_seconds)))
        except RedisError as exc:
            raise StoreError(f"{type(exc).__name__} while writing revocation entry") from exc

    def is_revoked(self, token_hash: str) -> bool:
        try:
            return bool(self.client.exists(self.key_for(token_hash)))
        except RedisError as exc:
            raise StoreError(f"{type(exc).__name__} while reading revocation entry") from exc

    def purge_expired(self) -> int:
        # Redis drops expired keys on its own.
        return 0

    def ping(self) -> None:
        try:
            self.client.ping()
        except RedisError as exc:
            raise StoreError(f"{type(exc).__name__} while pinging Redis") from exc
