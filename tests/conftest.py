"""Pytest fixtures and configuration"""

import os

# Settings are read once at import time, point them at throwaway backends first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CACHE_ENABLED"] = "false"

from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.schemas.group import Member, MemberCreate
from app.services.group_service import GroupService
from tests.helpers import GROUP_ID

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.
    The engine and its tables are thrown away after the test completes.
    """
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    # Create all tables
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestSessionLocal = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with TestSessionLocal() as session:
        yield session

    await test_engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database session override"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def members(db_session: AsyncSession) -> List[Member]:
    """Alice, Bob and Charlie in the default group"""
    return [
        await GroupService.add_member(db_session, GROUP_ID, MemberCreate(name=name))
        for name in ("Alice", "Bob", "Charlie")
    ]


@pytest.fixture
def alice(members: List[Member]) -> Member:
    return members[0]


@pytest.fixture
def bob(members: List[Member]) -> Member:
    return members[1]


@pytest.fixture
def charlie(members: List[Member]) -> Member:
    return members[2]
