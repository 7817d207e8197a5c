from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Garante que o pacote contacts_api seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from contacts_api.app import create_app  # noqa: E402
from contacts_api.core.config import Settings  # noqa: E402
from contacts_api.db import models  # noqa: E402
from contacts_api.db.session import build_engine, session_factory_for  # noqa: E402
from contacts_api.repositories.sql_repository import SQLRepository  # noqa: E402
from contacts_api.services import build_services  # noqa: E402

TEST_SECRET = "test-secret-key-for-testing-only-0123456789"


class FakeClock:
    """Manually advanced UTC clock shared by the components under test."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FakeRedis:
    """Minimal stand-in for the redis client surface used by the revocation repository."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.data: dict[str, tuple[str, datetime | None]] = {}
        self.ttls: dict[str, int] = {}

    def _alive(self, key: str) -> bool:
        entry = self.data.get(key)
        if entry is None:
            return False
        _, expires_at = entry
        if expires_at is not None and self.clock() >= expires_at:
            self.data.pop(key, None)
            return False
        return True

    def set(self, key, value, ex=None):
        expires_at = self.clock() + timedelta(seconds=ex) if ex else None
        self.data[key] = (value, expires_at)
        if ex:
            self.ttls[key] = ex
        return True

    def get(self, key):
        return self.data[key][0] if self._alive(key) else None

    def exists(self, *keys):
        return sum(1 for key in keys if self._alive(key))

    def ping(self):
        return True


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture()
def session_factory(db_url):
    """SQLite temporário com schema criado; engine descartado ao final."""
    engine = build_engine(db_url)
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield session_factory_for(engine)

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def repo(session_factory, clock):
    return SQLRepository(session_factory, clock=clock)


@pytest.fixture()
def settings(db_url):
    return Settings(
        app_env="test",
        database_url=db_url,
        redis_url="",
        jwt_secret=TEST_SECRET,
        jwt_algorithm="HS256",
        session_ttl_seconds=3600,
        log_level="WARNING",
        log_json=False,
        cors_origins=(),
    )


@pytest.fixture()
def services(settings, session_factory):
    return build_services(settings, session_factory=session_factory)


@pytest.fixture()
def client(settings, services):
    app = create_app(settings, services)
    with TestClient(app) as test_client:
        yield test_client
