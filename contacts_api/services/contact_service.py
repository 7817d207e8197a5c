"""Owner-scoped contact use cases."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, TypeVar

from contacts_api.core.logging import get_logger
from contacts_api.db.models import Contact
from contacts_api.domain.results import Err, ErrorKind, Identity, Ok, Result
from contacts_api.repositories import ConstraintViolation, ContactRepository, StoreError

logger = get_logger(__name__)

CONTACT_NOT_FOUND = "Contato não encontrado."

T = TypeVar("T")


@dataclass(frozen=True)
class OwnerScope:
    owner_id: int


@dataclass(frozen=True)
class ContactView:
    """Representation returned by listings (never carries the owner)."""

    id: int
    name: str
    phone: str

    @classmethod
    def from_entity(cls, entity: Contact) -> "ContactView":
        return cls(id=entity.id, name=entity.name, phone=entity.phone)


class OwnershipGate:
    """Restricts contact operations to rows owned by the authenticated identity.

    A row owned by someone else is reported exactly like a missing row.
    """

    def scope(self, identity: Identity) -> OwnerScope:
        return OwnerScope(owner_id=int(identity.user_id))

    def stamp(self, scope: OwnerScope, fields: Mapping[str, Any]) -> dict[str, Any]:
        values = {key: value for key, value in fields.items() if key not in {"user_id", "owner_id", "id"}}
        values["owner_id"] = scope.owner_id
        return values

    def resolve(self, row: Optional[T]) -> Result[T]:
        if row is None or row is False:
            return Err(ErrorKind.RESOURCE_NOT_FOUND, CONTACT_NOT_FOUND)
        return Ok(row)


def parse_contact_id(value: Any) -> Optional[int]:
    """Convert a path id to int; anything else can never match a row."""
    try:
        contact_id = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return contact_id if contact_id > 0 else None


class ContactStore:
    """CRUD over contacts, always filtered by the caller's identity."""

    def __init__(self, repository: ContactRepository, gate: OwnershipGate | None = None) -> None:
        self.repository = repository
        self.gate = gate or OwnershipGate()

    def list(self, identity: Identity) -> Result[list[ContactView]]:
        scope = self.gate.scope(identity)
        try:
            rows = self.repository.list_contacts(scope.owner_id)
        except StoreError as exc:
            logger.error("contacts_list_failed", error=str(exc))
            return Err(ErrorKind.INTERNAL)
        return Ok([ContactView.from_entity(row) for row in rows])

    def create(self, identity: Identity, name: str, phone: str, **extra: Any) -> Result[Contact]:
        scope = self.gate.scope(identity)
        values = self.gate.stamp(scope, {"name": name, "phone": phone, **extra})
        try:
            contact = self.repository.create_contact(values["owner_id"], values["name"], values["phone"])
        except ConstraintViolation:
            # Owner row vanished between token validation and insert.
            logger.warning("contact_create_orphaned", owner_id=scope.owner_id)
            return Err(ErrorKind.RESOURCE_NOT_FOUND, CONTACT_NOT_FOUND)
        except StoreError as exc:
            logger.error("contact_create_failed", error=str(exc))
            return Err(ErrorKind.INTERNAL)
        logger.info("contact_created", contact_id=contact.id, owner_id=scope.owner_id)
        return Ok(contact)

    def update(self, identity: Identity, contact_id: Any, name: str, phone: str) -> Result[Contact]:
        scope = self.gate.scope(identity)
        target = parse_contact_id(contact_id)
        if target is None:
            return self.gate.resolve(None)
        try:
            row = self.repository.update_contact(scope.owner_id, target, name, phone)
        except StoreError as exc:
            logger.error("contact_update_failed", error=str(exc))
            return Err(ErrorKind.INTERNAL)
        return self.gate.resolve(row)

    def delete(self, identity: Identity, contact_id: Any) -> Result[None]:
        scope = self.gate.scope(identity)
        target = parse_contact_id(contact_id)
        if target is None:
            return self.gate.resolve(None)
        try:
            deleted = self.repository.delete_contact(scope.owner_id, target)
        except StoreError as exc:
            logger.error("contact_delete_failed", error=str(exc))
            return Err(ErrorKind.INTERNAL)
        outcome = self.gate.resolve(deleted)
        if isinstance(outcome, Err):
            return outcome
        logger.info("contact_deleted", contact_id=target, owner_id=scope.owner_id)
        return Ok(None)
