"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from contacts_api.db.models import Contact, RevokedToken, User
from contacts_api.db.session import SessionFactory, get_session

from .errors import ConstraintViolation, StoreError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session.

    Every public method opens its own session; database failures surface as
    StoreError so services never see driver-specific exceptions.
    """

    def __init__(self, session_factory: SessionFactory | None = None, clock: Callable[[], datetime] | None = None) -> None:
        self._session_factory = session_factory or get_session
        self._clock = clock or _utcnow

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StoreError(f"{type(exc).__name__} during SQL operation") from exc

    # -------------------------- users --------------------------
    def create_user(self, username: str, password_hash: str) -> User:
        user = User(username=username, password_hash=password_hash, created_at=self._clock())
        with self._session() as session:
            session.add(user)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConstraintViolation("username already registered", field="username") from exc
            session.refresh(user)
            return user

    def get_user(self, user_id: int) -> Optional[User]:
        with self._session() as session:
            return session.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._session() as session:
            stmt = select(User).where(User.username == username)
            return session.execute(stmt).scalar_one_or_none()

    # -------------------------- contacts --------------------------
    def list_contacts(self, owner_id: int) -> list[Contact]:
        with self._session() as session:
            stmt = select(Contact).where(Contact.user_id == owner_id).order_by(Contact.name, Contact.id)
            return list(session.execute(stmt).scalars().all())

    def create_contact(self, owner_id: int, name: str, phone: str) -> Contact:
        now = self._clock()
        entity = Contact(name=name, phone=phone, user_id=owner_id, created_at=now, updated_at=now)
        with self._session() as session:
            session.add(entity)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConstraintViolation("contact owner does not exist", field="user_id") from exc
            session.refresh(entity)
            return entity

    def update_contact(self, owner_id: int, contact_id: int, name: str, phone: str) -> Optional[Contact]:
        with self._session() as session:
            stmt = (
                update(Contact)
                .where(Contact.id == contact_id, Contact.user_id == owner_id)
                .values(name=name, phone=phone, updated_at=self._clock())
                .execution_options(synchronize_session=False)
            )
            result = session.execute(stmt)
            if result.rowcount == 0:
                session.rollback()
                return None
            session.commit()
            return session.get(Contact, contact_id)

    def delete_contact(self, owner_id: int, contact_id: int) -> bool:
        with self._session() as session:
            stmt = delete(Contact).where(Contact.id == contact_id, Contact.user_id == owner_id)
            result = session.execute(stmt)
            session.commit()
            return result.rowcount > 0

    # -------------------------- revoked tokens --------------------------
    def revoke(self, token_hash: str, expires_at: datetime, ttl_seconds: int) -> None:
        with self._session() as session:
            session.merge(RevokedToken(token_hash=token_hash, expires_at=expires_at, revoked_at=self._clock()))
            try:
                session.commit()
            except IntegrityError:
                # A concurrent logout inserted the same hash first.
                session.rollback()

    def is_revoked(self, token_hash: str) -> bool:
        with self._session() as session:
            stmt = (
                select(RevokedToken.token_hash)
                .where(RevokedToken.token_hash == token_hash, RevokedToken.expires_at >= self._clock())
                .limit(1)
            )
            return session.execute(stmt).first() is not None

    def purge_expired(self) -> int:
        with self._session() as session:
            result = session.execute(delete(RevokedToken).where(RevokedToken.expires_at < self._clock()))
            session.commit()
            return int(result.rowcount or 0)
