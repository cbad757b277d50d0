"""
Test configuration and fixtures

Services run against a fresh in-memory SQLite database per test; API tests go
through the ASGI app with get_db pointed at that database.
"""
import os

# Set testing environment before the app modules read it
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ADMIN_API_TOKEN"] = "test_admin_token"
os.environ["TOGETHER_API_KEY"] = ""

from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from testcademy.database import Base, get_db
import testcademy.models  # noqa: F401

fake = Faker()

ADMIN_TOKEN = "test_admin_token"


@pytest.fixture
async def db_engine():
    """Fresh in-memory database with every table created"""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def enquiry_data() -> dict:
    """A valid public submission"""
    return {
        "full_name": fake.name(),
        "email": fake.email(),
        "phone": "+91 98765-43210",
        "course_id": None,
        "course_interest": "Test Automation with Selenium",
        "message": fake.sentence(nb_words=12),
    }
