"""
High-level use cases for the contacts API.

Routers call these services instead of touching repositories directly.
build_services() wires the concrete adapters once per application.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from contacts_api.core.config import Settings
from contacts_api.db.session import SessionFactory, build_engine, session_factory_for
from contacts_api.repositories import RevocationRepository
from contacts_api.repositories.redis_repository import RedisRevocationRepository
from contacts_api.repositories.sql_repository import SQLRepository

from .auth_service import AuthService
from .contact_service import ContactStore, OwnershipGate
from .credential_service import CredentialStore
from .revocation_service import RevocationLedger
from .token_service import TokenIssuer, TokenValidator


@dataclass
class Services:
    auth: AuthService
    validator: TokenValidator
    contacts: ContactStore
    repository: SQLRepository


def build_services(
    settings: Settings,
    *,
    session_factory: Optional[SessionFactory] = None,
    revocations: Optional[RevocationRepository] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Services:
    if session_factory is None:
        session_factory = session_factory_for(build_engine(settings.database_url))
    repository = SQLRepository(session_factory, clock=clock)
    if revocations is None:
        revocations = RedisRevocationRepository.from_url(settings.redis_url) if settings.redis_url else repository

    ledger = RevocationLedger(revocations, clock=clock)
    issuer = TokenIssuer(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl_seconds=settings.session_ttl_seconds,
        clock=clock,
    )
    validator = TokenValidator(settings.jwt_secret, ledger, algorithm=settings.jwt_algorithm, clock=clock)
    auth = AuthService(
        credentials=CredentialStore(repository),
        issuer=issuer,
        validator=validator,
        ledger=ledger,
    )
    return Services(
        auth=auth,
        validator=validator,
        contacts=ContactStore(repository, OwnershipGate()),
        repository=repository,
    )
