from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from contacts_api.db.models import Contact
from contacts_api.domain.results import Err, Identity
from contacts_api.domain.validation import CONTACT_RULES, validate_body
from contacts_api.services import Services

from . import responses
from .deps import get_services, require_identity

# Every route resolves the caller through require_identity before touching data.
router = APIRouter(prefix="/contacts", tags=["contacts"])


def _contact_dict(contact: Contact) -> dict:
    return {"id": contact.id, "name": contact.name, "phone": contact.phone, "user_id": contact.user_id}


@router.post("")
def create_contact(
    payload: Any = Body(None),
    identity: Identity = Depends(require_identity),
    services: Services = Depends(get_services),
):
    errors = validate_body(payload, CONTACT_RULES)
    if errors:
        return responses.validation_failure(errors)
    outcome = services.contacts.create(identity, payload["name"], payload["phone"])
    if isinstance(outcome, Err):
        return responses.from_error(outcome)
    return responses.success(
        {"message": "Contato criado com sucesso.", "contact": _contact_dict(outcome.value)},
        status_code=201,
    )


@router.get("")
def list_contacts(identity: Identity = Depends(require_identity), services: Services = Depends(get_services)):
    outcome = services.contacts.list(identity)
    if isinstance(outcome, Err):
        return responses.from_error(outcome)
    contacts = [{"id": c.id, "name": c.name, "phone": c.phone} for c in outcome.value]
    return responses.success({"contacts": contacts})


@router.put("/{contact_id}")
def update_contact(
    contact_id: str,
    payload: Any = Body(None),
    identity: Identity = Depends(require_identity),
    services: Services = Depends(get_services),
):
    errors = validate_body(payload, CONTACT_RULES)
    if errors:
        return responses.validation_failure(errors)
    outcome = services.contacts.update(identity, contact_id, payload["name"], payload["phone"])
    if isinstance(outcome, Err):
        return responses.from_error(outcome)
    return responses.success({"message": "Contato atualizado com sucesso.", "contact": _contact_dict(outcome.value)})


@router.delete("/{contact_id}")
def delete_contact(
    contact_id: str,
    identity: Identity = Depends(require_identity),
    services: Services = Depends(get_services),
):
    outcome = services.contacts.delete(identity, contact_id)
    if isinstance(outcome, Err):
        return responses.from_error(outcome)
    return responses.success({"message": "Contato deletado com sucesso."})
