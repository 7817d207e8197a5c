"""User registration and password verification."""

from __future__ import annotations

from contacts_api.core.logging import get_logger
from contacts_api.core.security import burn_password_check, hash_password, verify_password
from contacts_api.db.models import User
from contacts_api.domain.results import Err, ErrorKind, Ok, Result
from contacts_api.repositories import ConstraintViolation, StoreError, UserRepository

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Credenciais inválidas."


class CredentialStore:
    """Durable user records keyed by a unique, case-sensitive username."""

    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository

    def register(self, username: str, password: str) -> Result[User]:
        # Uniqueness is left to the database constraint; a pre-read would race.
        password_hash = hash_password(password)
        try:
            user = self.repository.create_user(username, password_hash)
        except ConstraintViolation:
            logger.info("register_rejected", reason="duplicate_username")
            return Err(ErrorKind.DUPLICATE_IDENTITY, "Usuário já existe.")
        except StoreError as exc:
            logger.error("register_failed", error=str(exc))
            return Err(ErrorKind.INTERNAL)
        logger.info("user_registered", user_id=user.id)
        return Ok(user)

    def verify(self, username: str, password: str) -> Result[User]:
        try:
            user = self.repository.get_user_by_username(username)
        except StoreError as exc:
            logger.error("credential_lookup_failed", error=str(exc))
            return Err(ErrorKind.INTERNAL)
        if user is None:
            burn_password_check(password)
            logger.info("login_rejected")
            return Err(ErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS)
        if not verify_password(password, user.password_hash):
            logger.info("login_rejected")
            return Err(ErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS)
        return Ok(user)
