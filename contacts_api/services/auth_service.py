"""
Authentication use cases: registration, login and logout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from contacts_api.core.logging import get_logger
from contacts_api.db.models import User
from contacts_api.domain.results import Err, ErrorKind, Ok, Result
from contacts_api.repositories import StoreError
from contacts_api.services.credential_service import CredentialStore
from contacts_api.services.revocation_service import RevocationLedger
from contacts_api.services.token_service import SessionToken, TokenIssuer, TokenValidator

logger = get_logger(__name__)


@dataclass(frozen=True)
class UserSummary:
    id: int
    username: str

    @classmethod
    def from_entity(cls, user: User) -> "UserSummary":
        return cls(id=user.id, username=user.username)


@dataclass(frozen=True)
class LoginSuccess:
    token: SessionToken
    user: UserSummary


@dataclass
class AuthService:
    """Handles registration, login and logout flows."""

    credentials: CredentialStore
    issuer: TokenIssuer
    validator: TokenValidator
    ledger: RevocationLedger

    # -------------------------------------- registro --------------------------------------
    def register(self, username: str, password: str) -> Result[UserSummary]:
        outcome = self.credentials.register(username, password)
        if isinstance(outcome, Err):
            return outcome
        return Ok(UserSummary.from_entity(outcome.value))

    # -------------------------------------- login --------------------------------------
    def login(self, username: str, password: str) -> Result[LoginSuccess]:
        outcome = self.credentials.verify(username, password)
        if isinstance(outcome, Err):
            return outcome
        user = outcome.value
        token = self.issuer.issue(user.id)
        logger.info("session_issued", user_id=user.id, expires_at=token.expires_at.isoformat())
        return Ok(LoginSuccess(token=token, user=UserSummary.from_entity(user)))

    # -------------------------------------- logout --------------------------------------
    def logout(self, raw_token: Optional[str]) -> Result[None]:
        # Only a currently valid token can be revoked; a second logout sees TOKEN_REVOKED.
        checked = self.validator.inspect(raw_token)
        if isinstance(checked, Err):
            return checked
        token = checked.value
        try:
            self.ledger.add(token.raw, token.expires_at)
        except StoreError as exc:
            logger.error("logout_failed", error=str(exc))
            return Err(ErrorKind.INTERNAL)
        logger.info("session_revoked", user_id=token.subject)
        return Ok(None)
