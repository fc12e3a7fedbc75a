"""
Shared pytest fixtures and configuration for all tests.
"""

import os
import sys
from collections.abc import AsyncGenerator, Generator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID, uuid4

import pytest
import pytest_asyncio

# Add src directory to path so imports work
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest_asyncio.fixture(scope="function")
async def test_database(tmp_path: Path) -> AsyncGenerator[str, None]:
    """
    Point the shared connection pool at a fresh SQLite database file.

    A file is used instead of ``:memory:`` so that concurrent sessions see the
    same data.
    """
    from talawa.database.connection import get_async_engine, init_database, reset_database
    from talawa.dbmodels import Base

    dsn = f"sqlite:///{tmp_path / 'talawa-test.db'}"

    reset_database()
    init_database(dsn, force_reinit=True)

    engine = get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield dsn

    await engine.dispose()
    reset_database()


@pytest.fixture
def graphql_context() -> dict[str, Any]:
    """GraphQL context as built by the router, with a stand-in request."""
    from talawa.graphql.loaders import Loaders

    return {"request": MagicMock(), "loaders": Loaders()}


@pytest.fixture
def authenticate_as():
    """
    Patch the request auth lookup so resolvers see the given user id.

    Passing ``None`` makes the request unauthenticated.
    """
    from talawa.auth.context import AuthContext

    patchers = []

    def _authenticate(user_id: UUID | None) -> None:
        if user_id is None:
            context = AuthContext.anonymous()
        else:
            context = AuthContext(
                user_id=user_id,
                principal={"provider": "jwt", "subject": str(user_id)},
                token="test-token",
            )
        patcher = patch(
            "talawa.graphql.access_control.get_auth_context_from_info",
            new=AsyncMock(return_value=context),
        )
        patcher.start()
        patchers.append(patcher)

    yield _authenticate

    for patcher in reversed(patchers):
        patcher.stop()


async def _create_user(role: str = "regular", user_id: UUID | None = None, **kwargs: Any):
    """Insert a user row and return it."""
    from talawa.database.connection import get_async_session
    from talawa.dbmodels import Users

    user_id = user_id or uuid4()
    user = Users(
        id=user_id,
        name=kwargs.pop("name", f"User {str(user_id)[:8]}"),
        email_address=kwargs.pop("email_address", f"{user_id}@example.com"),
        role=role,
        created_at=kwargs.pop("created_at", datetime.now(UTC)),
        **kwargs,
    )
    async with get_async_session() as session:
        session.add(user)
    return user


async def _add_rows(*rows: Any) -> None:
    """Insert arbitrary model instances in one transaction."""
    from talawa.database.connection import get_async_session

    async with get_async_session() as session:
        session.add_all(rows)


@pytest.fixture
def create_user():
    return _create_user


@pytest.fixture
def add_rows():
    return _add_rows


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


# Test markers
def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line(  # type: ignore[reportUnknownMemberType]
        "markers", "requires_db: mark test as requiring database connection"
    )
    config.addinivalue_line("markers", "integration: mark test as integration test")  # type: ignore[reportUnknownMemberType]
    config.addinivalue_line("markers", "unit: mark test as unit test")  # type: ignore[reportUnknownMemberType]
