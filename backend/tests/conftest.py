"""
Pytest configuration and fixtures for TaskPulse tests.
"""

import pytest
import pytest_asyncio
from fastapi import Request
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel

import taskpulse.models  # noqa: F401  (registers tables)
from taskpulse.auth import AuthenticatedUser, get_current_user
from taskpulse.database import get_session
from taskpulse.main import app
from taskpulse.services.members import MemberDirectory, get_member_directory
from taskpulse.schemas import Member
from taskpulse.services.task_store import TaskStore

TEST_USER = "user-alice"
OTHER_USER = "user-bob"


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """SQLite database in a per-test temp file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'taskpulse.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_session(session_maker):
    """Create a test database session."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def store(test_session):
    """TaskStore for TEST_USER on the test session."""
    return TaskStore(test_session, TEST_USER, default_category="Personal")


def _override_session(session_maker):
    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return override_get_session


async def _override_user(request: Request) -> AuthenticatedUser:
    # Tests pick the caller with a header instead of a Firebase token
    return AuthenticatedUser(uid=request.headers.get("X-Test-User", TEST_USER))


@pytest_asyncio.fixture(scope="function")
async def client(session_maker):
    """Authenticated async test client backed by the test database."""
    app.dependency_overrides[get_session] = _override_session(session_maker)
    app.dependency_overrides[get_current_user] = _override_user
    app.dependency_overrides[get_member_directory] = lambda: MemberDirectory([
        Member(id="m-2", name="Jane Smith", email="jane@example.com"),
        Member(id="m-1", name="John Doe", email="john@example.com"),
    ])

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def anonymous_client(session_maker):
    """Client with the real auth dependency, so no identity is available."""
    app.dependency_overrides[get_session] = _override_session(session_maker)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
