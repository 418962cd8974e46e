# tests/conftest.py

"""Pytest configuration and fixtures."""

import os
import uuid
from typing import AsyncGenerator

os.environ.setdefault("AUTH_SECRET", "test-secret")
os.environ.setdefault("JWT_ISSUER", "test-issuer")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from pytest_asyncio import is_async_test  # noqa: E402
from quizrank.db.models import Base, PlayerSession, Quiz  # noqa: E402
from quizrank.db.session import get_db  # noqa: E402
from quizrank.main import app  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(TEST_DATABASE_URL)
AsyncTestingSessionLocal = async_sessionmaker(
    bind=engine, expire_on_commit=False, autocommit=False, autoflush=False
)


def pytest_collection_modifyitems(items):
    """Run every async test on the session loop the shared engine lives on."""
    session_scope_marker = pytest.mark.asyncio(loop_scope="session")
    for item in items:
        if is_async_test(item):
            item.add_marker(session_scope_marker, append=False)


@pytest.fixture(scope="session", autouse=True)
async def setup_database():
    """Fixture to create and tear down the test database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Fixture to provide a transactional database session to a test.
    The transaction is rolled back after the test, ensuring isolation.
    """
    connection = await engine.connect()
    transaction = await connection.begin()
    session = AsyncTestingSessionLocal(bind=connection)

    yield session

    # After the test is done, roll back the transaction to clean up.
    await session.close()
    if transaction.is_active:
        await transaction.rollback()
    await connection.close()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Fixture to provide an async test client for the API."""

    # Override the get_db dependency to use the test database
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    # Clean up the override after the test
    del app.dependency_overrides[get_db]


@pytest.fixture
def make_quiz(db_session: AsyncSession):
    """Factory fixture that stores a quiz record and returns it."""

    async def _make_quiz(question_count: int = 5, session_id: str = "owner") -> Quiz:
        quiz = Quiz(
            id=str(uuid.uuid4()),
            session_id=session_id,
            source="mock",
            question_count=question_count,
        )
        db_session.add(quiz)
        await db_session.commit()
        return quiz

    return _make_quiz


@pytest.fixture
def make_session(db_session: AsyncSession):
    """Factory fixture that stores a session row and returns it."""

    async def _make_session(
        session_id: str | None = None,
        user_id: str | None = None,
        revoked: bool = False,
    ) -> PlayerSession:
        session = PlayerSession(
            id=session_id or uuid.uuid4().hex, user_id=user_id, revoked=revoked
        )
        db_session.add(session)
        await db_session.commit()
        return session

    return _make_session
