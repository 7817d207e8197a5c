from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from contacts_api.domain.results import Err
from contacts_api.domain.validation import USER_RULES, validate_body
from contacts_api.services import Services

from . import responses
from .deps import get_services, require_token

router = APIRouter(prefix="/users", tags=["users"])


@router.post("")
def register(payload: Any = Body(None), services: Services = Depends(get_services)):
    errors = validate_body(payload, USER_RULES)
    if errors:
        return responses.validation_failure(errors)
    outcome = services.auth.register(payload["username"], payload["password"])
    if isinstance(outcome, Err):
        return responses.from_error(outcome)
    user = outcome.value
    return responses.success(
        {"message": "Usuário criado com sucesso.", "user": {"id": user.id, "username": user.username}},
        status_code=201,
    )


@router.post("/login")
def login(payload: Any = Body(None), services: Services = Depends(get_services)):
    errors = validate_body(payload, USER_RULES)
    if errors:
        return responses.validation_failure(errors)
    outcome = services.auth.login(payload["username"], payload["password"])
    if isinstance(outcome, Err):
        return responses.from_error(outcome)
    result = outcome.value
    return responses.success(
        {
            "token": result.token.raw,
            "user": {"id": result.user.id, "username": result.user.username},
        }
    )


@router.post("/logout")
def logout(request: Request, token: str = Depends(require_token)):
    outcome = get_services(request).auth.logout(token)
    if isinstance(outcome, Err):
        return responses.from_error(outcome)
    return responses.success({"message": "Logout realizado com sucesso. Token invalidado."})
