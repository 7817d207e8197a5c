"""Session token issuance and validation (signed JWTs + revocation lookup)."""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import jwt

from contacts_api.core.logging import get_logger
from contacts_api.core.security import hash_token
from contacts_api.domain.results import Err, ErrorKind, Identity, Ok, Result
from contacts_api.repositories import StoreError
from contacts_api.services.revocation_service import RevocationLedger

logger = get_logger(__name__)

_REQUIRED_CLAIMS = ["sub", "iat", "exp", "jti"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionToken:
    raw: str
    subject: int
    issued_at: datetime
    expires_at: datetime
    token_id: str

    @property
    def identity(self) -> Identity:
        return Identity(user_id=self.subject)


class TokenIssuer:
    """Creates signed, time-bounded session tokens bound to a user id."""

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        ttl_seconds: int = 3600,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self.ttl_seconds = ttl_seconds
        self._clock = clock or _utcnow

    def issue(self, user_id: int) -> SessionToken:
        issued_at = self._clock().replace(microsecond=0)
        expires_at = issued_at + timedelta(seconds=self.ttl_seconds)
        token_id = secrets.token_urlsafe(16)
        payload = {
            "sub": str(user_id),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": token_id,
        }
        raw = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return SessionToken(raw=raw, subject=int(user_id), issued_at=issued_at, expires_at=expires_at, token_id=token_id)


class TokenValidator:
    """The single gate every protected operation goes through.

    A token moves from Valid to Expired (time) or Revoked (logout); both are
    terminal. Checks run in order: signature/structure, expiry, revocation.
    """

    def __init__(
        self,
        secret: str,
        ledger: RevocationLedger,
        *,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self.ledger = ledger
        self._clock = clock or _utcnow

    def _decode(self, raw_token: str) -> Optional[SessionToken]:
        try:
            payload: dict[str, Any] = jwt.decode(
                raw_token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_iat": False, "require": _REQUIRED_CLAIMS},
            )
        except jwt.InvalidTokenError:
            return None
        iat, exp = payload.get("iat"), payload.get("exp")
        if not isinstance(iat, (int, float)) or not isinstance(exp, (int, float)):
            return None
        try:
            subject = int(payload["sub"])
        except (TypeError, ValueError):
            return None
        return SessionToken(
            raw=raw_token,
            subject=subject,
            issued_at=datetime.fromtimestamp(iat, timezone.utc),
            expires_at=datetime.fromtimestamp(exp, timezone.utc),
            token_id=str(payload["jti"]),
        )

    def _reject(self, kind: ErrorKind) -> Err:
        logger.info("token_rejected", reason=kind.value)
        return Err(kind)

    def inspect(self, raw_token: str | None) -> Result[SessionToken]:
        """Run every check and return the parsed token when it is still valid."""
        if not raw_token:
            return self._reject(ErrorKind.TOKEN_MALFORMED)
        token = self._decode(raw_token)
        if token is None:
            return self._reject(ErrorKind.TOKEN_MALFORMED)
        if self._clock() > token.expires_at:
            return self._reject(ErrorKind.TOKEN_EXPIRED)
        try:
            revoked = self.ledger.contains(hash_token(raw_token))
        except StoreError as exc:
            logger.error("revocation_lookup_failed", error=str(exc))
            return Err(ErrorKind.INTERNAL)
        if revoked:
            return self._reject(ErrorKind.TOKEN_REVOKED)
        return Ok(token)

    def validate(self, raw_token: str | None) -> Result[Identity]:
        outcome = self.inspect(raw_token)
        if isinstance(outcome, Err):
            return outcome
        return Ok(outcome.value.identity)
