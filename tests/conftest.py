"""
Global test configuration.

Points DATABASE_URL at a throwaway SQLite file before the application is
imported, so the engine in ``dispatch_api.config.database`` never touches
PostgreSQL. The distance service is replaced with ``FakeDistanceResolver``.
"""
import os
import tempfile

_TEST_DIR = tempfile.mkdtemp(prefix="dispatch-api-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'dispatch.db')}"
os.environ["MAPS_API_KEY"] = "test-key"
os.environ["DB_CONNECT_MAX_RETRIES"] = "0"

import pytest
from fastapi.testclient import TestClient

from dispatch_api.config.database import Base, SessionLocal, engine, init_db
from dispatch_api.main import app
from dispatch_api.shared.services.distance_client import get_distance_resolver


class FakeDistanceResolver:
    """Deterministic stand-in for the Distance Matrix client."""

    def __init__(self, distance: float = 500.0):
        self.distance = distance
        self.error = None
        self.calls = []

    async def resolve(self, origin, destination):
        self.calls.append((list(origin), list(destination)))
        if self.error is not None:
            raise self.error
        return self.distance


@pytest.fixture
def database():
    """Fresh schema per test; ids restart at 1."""
    init_db(max_retries=0)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(database):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def fake_resolver():
    return FakeDistanceResolver()


@pytest.fixture
def client(database, fake_resolver):
    app.dependency_overrides[get_distance_resolver] = lambda: fake_resolver
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
