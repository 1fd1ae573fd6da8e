"""
Test fixtures for TripMate backend tests.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from tripmate.database import Base, get_db, enable_sqlite_foreign_keys
from tripmate.main import app
from tripmate.services.geocoding import get_geocoder
from tripmate.services.messaging import get_notifier
from tripmate.services.routing import get_router
import tripmate.models  # noqa: F401

from fakes import FakeGeocoder, FakeNotifier, FakeRouter


# Create test database engine (SQLite in-memory, one shared connection)
TEST_DATABASE_URL = "sqlite:///:memory:"

test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

enable_sqlite_foreign_keys(test_engine)

TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def override_get_db(db_session):
    """
    Override the get_db dependency to use the test database session.
    """
    def _override_get_db():
        try:
            yield db_session
        finally:
            pass

    return _override_get_db


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder()


@pytest.fixture
def fake_router():
    return FakeRouter()


@pytest.fixture
def fake_notifier():
    return FakeNotifier()


@pytest.fixture(scope="function")
async def client(override_get_db, fake_geocoder, fake_router, fake_notifier):
    """
    Async test client acting as ``user-1``, with the database and every
    outbound service swapped for in-process fakes.
    """
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_geocoder] = lambda: fake_geocoder
    app.dependency_overrides[get_router] = lambda: fake_router
    app.dependency_overrides[get_notifier] = lambda: fake_notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-User-Id": "user-1"},
    ) as ac:
        yield ac

    # Clear overrides after test
    app.dependency_overrides.clear()
