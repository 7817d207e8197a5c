"""Request-scoped helpers: service lookup and bearer-token authentication."""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request

from contacts_api.domain.results import Err, Identity
from contacts_api.services import Services

from .responses import NO_TOKEN, message_for, status_for


def get_services(request: Request) -> Services:
    svc = getattr(getattr(request.app, "state", None), "services", None)
    if not svc:
        raise RuntimeError("Services nao configurados")
    return svc


def bearer_token(request: Request) -> Optional[str]:
    """Return the raw token from ``Authorization: Bearer <token>`` or None."""
    header = (request.headers.get("authorization") or "").strip()
    scheme, _, value = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return value.strip() or None


def require_token(request: Request) -> str:
    token = bearer_token(request)
    if not token:
        raise HTTPException(401, NO_TOKEN)
    return token


def require_identity(request: Request) -> Identity:
    """Validate the bearer token on every call and hand back the caller identity."""
    token = require_token(request)
    outcome = get_services(request).validator.validate(token)
    if isinstance(outcome, Err):
        raise HTTPException(status_for(outcome.kind), message_for(outcome.kind))
    return outcome.value
