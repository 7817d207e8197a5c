"""
Persistence adapters.

Services depend on the protocols below and receive a concrete adapter
(SQLRepository, RedisRevocationRepository) at construction time.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from contacts_api.db.models import Contact, User

from .errors import ConstraintViolation, StoreError


class UserRepository(Protocol):
    def create_user(self, username: str, password_hash: str) -> User: ...

    def get_user(self, user_id: int) -> Optional[User]: ...

    def get_user_by_username(self, username: str) -> Optional[User]: ...


class ContactRepository(Protocol):
    def list_contacts(self, owner_id: int) -> list[Contact]: ...

    def create_contact(self, owner_id: int, name: str, phone: str) -> Contact: ...

    def update_contact(self, owner_id: int, contact_id: int, name: str, phone: str) -> Optional[Contact]: ...

    def delete_contact(self, owner_id: int, contact_id: int) -> bool: ...


class RevocationRepository(Protocol):
    def revoke(self, token_hash: str, expires_at: datetime, ttl_seconds: int) -> None: ...

    def is_revoked(self, token_hash: str) -> bool: ...

    def purge_expired(self) -> int: ...


__all__ = [
    "ConstraintViolation",
    "ContactRepository",
    "RevocationRepository",
    "StoreError",
    "UserRepository",
]
