"""
Coffee Catalog Backend: Test Configuration (conftest.py)
=========================================================

What:  Shared pytest fixtures for the whole suite.
How:   Environment overrides are applied before any `catalog` import so the
       settings singleton and the engine pick them up.

Fixtures:
    ├── mock_db_session: AsyncMock standing in for an AsyncSession
    ├── memory_store:    fresh InMemoryCatalogStore
    ├── coffee_service:  CoffeeService over memory_store
    ├── auth_headers:    Authorization header accepted by the API-key guard
    └── test_client:     httpx AsyncClient on a fresh app using memory_store
"""

import os
from unittest.mock import AsyncMock, MagicMock

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["API_KEY"] = "test-api-key"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from catalog.repositories.memory import InMemoryCatalogStore
from catalog.services.coffee_service import CoffeeService

TEST_API_KEY = "test-api-key"


@pytest.fixture
def mock_db_session():
    """
    Mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = coffee
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def memory_store():
    return InMemoryCatalogStore()


@pytest.fixture
def coffee_service(memory_store):
    return CoffeeService(memory_store)


@pytest.fixture
def auth_headers():
    return {"Authorization": TEST_API_KEY}


@pytest_asyncio.fixture
async def test_client(memory_store):
    """
    HTTPX AsyncClient talking to a fresh app through ASGITransport.

    The catalog store dependency is overridden with `memory_store`, so no
    database is needed. Lifespan events are not run.
    """
    from catalog.dependencies import get_catalog_store
    from catalog.main import create_app

    app = create_app()
    app.dependency_overrides[get_catalog_store] = lambda: memory_store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
