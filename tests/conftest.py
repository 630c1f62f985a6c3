"""
Shared pytest fixtures and configuration for all tests.
"""

import os
import uuid
from collections.abc import AsyncGenerator, Generator
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
import strawberry
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from chatline.auth.context import AuthContext
from chatline.dbmodels import Base, Users
from chatline.events.bus import InMemoryEventBus


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


def make_auth_context(user_id: uuid.UUID | None) -> AuthContext:
    """An authenticated session for ``user_id``, or an anonymous one for None."""
    if user_id is None:
        return AuthContext(user_id=None, principal=None, token=None)
    return AuthContext(
        user_id=user_id,
        principal={"provider": "none", "subject": str(user_id)},
        token="test-token",
    )


def make_info(auth_context: AuthContext | None = None, event_bus: Any = None) -> MagicMock:
    """A GraphQL info object whose context already carries the session."""
    info = MagicMock(spec=strawberry.Info)
    context: dict[str, Any] = {
        "request": MagicMock(headers=MagicMock(get=MagicMock(return_value=None))),
        "event_bus": event_bus,
    }
    if auth_context is not None:
        context["auth_context"] = auth_context
    info.context = context
    return info


@pytest.fixture
def mock_session() -> Generator[AsyncMock, None, None]:
    """Patch the resolvers' session factory with an AsyncSession mock."""
    with patch("chatline.graphql.resolvers.conversation.get_async_session") as factory:
        session = AsyncMock(spec=AsyncSession)
        factory.return_value.__aenter__.return_value = session
        factory.return_value.__aexit__.return_value = False
        yield session


@pytest_asyncio.fixture
async def sqlite_sessionmaker() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """In-memory SQLite database with the full schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, autoflush=False)

    await engine.dispose()


@pytest.fixture
def sqlite_store(
    sqlite_sessionmaker: async_sessionmaker[AsyncSession],
) -> Generator[async_sessionmaker[AsyncSession], None, None]:
    """Route the resolvers' sessions to the in-memory SQLite database."""

    @asynccontextmanager
    async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with sqlite_sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    with (
        patch("chatline.graphql.resolvers.conversation.get_async_session", get_async_session),
        patch("chatline.graphql.resolvers.auth.get_async_session", get_async_session),
    ):
        yield sqlite_sessionmaker


@pytest_asyncio.fixture
async def users(sqlite_sessionmaker: async_sessionmaker[AsyncSession]) -> dict[str, uuid.UUID]:
    """Three stored users, keyed by username."""
    ids = {name: uuid.uuid4() for name in ("u1", "u2", "u3")}
    async with sqlite_sessionmaker() as session:
        for name, user_id in ids.items():
            session.add(
                Users(
                    id=user_id,
                    auth_provider="none",
                    auth_subject=name,
                    username=name,
                    email=f"{name}@example.com",
                )
            )
        await session.commit()
    return ids


# Test markers
def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")


@pytest.fixture
def auth_context_for():
    """Factory fixture: ``auth_context_for(user_id)`` builds a session."""
    return make_auth_context


@pytest.fixture
def info_for(event_bus: InMemoryEventBus):
    """Factory fixture: ``info_for(user_id)`` builds an info for that session."""

    def _info_for(user_id: uuid.UUID | None, bus: Any = None) -> MagicMock:
        return make_info(make_auth_context(user_id), bus if bus is not None else event_bus)

    return _info_for
