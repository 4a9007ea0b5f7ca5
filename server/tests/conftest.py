"""Test configuration and fixtures."""

import os

# The application engine is built at import time; point it at SQLite first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rentals.core.database import Base, get_db
from rentals.models import *  # noqa: F403 - Import all models
from rentals.repositories import InMemoryBookingStore, SqlAlchemyBookingStore
from rentals.services import AvailabilityService, BookingService

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """Create the application with the database dependency pointed at the test session."""
    from rentals.main import create_app

    app = create_app()

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sql_store(test_session):
    """Booking store over the test session."""
    return SqlAlchemyBookingStore(test_session)


@pytest.fixture
def memory_store():
    """Empty in-memory booking store."""
    return InMemoryBookingStore()


@pytest.fixture
def availability(memory_store):
    """Availability engine over the in-memory store."""
    return AvailabilityService(memory_store)


@pytest.fixture
def booking_service(memory_store, availability):
    """Booking lifecycle service over the in-memory store."""
    return BookingService(memory_store, availability)


@pytest.fixture
def chairs(memory_store):
    """An item with 100 units."""
    return memory_store.add_item("Folding chair", 100)


@pytest.fixture
def november():
    """Helper building dates in November 2025."""
    def build(day: int) -> date:
        return date(2025, 11, day)
    return build


@pytest.fixture
def sample_item_data():
    """Sample item data for testing."""
    return {
        "name": "Round table",
        "unit": "pcs",
        "total_quantity": 10,
        "price": "12.50",
        "notes": "Seats eight"
    }
