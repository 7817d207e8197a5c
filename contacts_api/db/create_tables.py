"""Schema bootstrap for the users, contacts and revoked_tokens tables."""
from __future__ import annotations

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from contacts_api.core.logging import get_logger

from .session import Base, get_engine
from . import models  # noqa: F401  # registers the mapped tables on Base.metadata

logger = get_logger(__name__)


def create_all(engine: Engine | None = None) -> list[str]:
    """Create missing tables and return their names; existing tables are left alone."""
    engine = engine or get_engine()
    existing = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine)
    created = [name for name in Base.metadata.tables if name not in existing]
    if created:
        logger.info("schema_created", tables=created)
    return created


if __name__ == "__main__":
    try:
        tables = create_all()
    except SQLAlchemyError as exc:
        raise SystemExit(f"Falha ao criar tabelas: {exc}") from exc
    print(f"OK: {len(tables)} tabela(s) criada(s): {', '.join(tables) or '-'}")
