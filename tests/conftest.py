"""Shared fixtures for catalog tests.

Tests run against a temporary SQLite database through aiosqlite.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

import shopcatalog.catalog.models  # noqa: F401  (registers tables)
from shopcatalog.catalog.models import Product
from shopcatalog.catalog.service import CatalogService
from shopcatalog.infrastructure.database import Base


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create an engine on a fresh SQLite file with the catalog schema."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")

    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; let SQLAlchemy emit it
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session for one test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def service(session: AsyncSession) -> CatalogService:
    """Catalog service on the test session."""
    return CatalogService(session)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


def product_payload(**overrides: Any) -> dict[str, Any]:
    """Build a product creation payload."""
    payload: dict[str, Any] = {
        "title": "Slim Fit Oxford Shirt",
        "description": "Cotton oxford shirt",
        "brand": "Northwind",
        "imageUrl": "https://picsum.photos/seed/1/400/400",
        "color": "White",
        "price": 200,
        "discountedPrice": 150,
        "discountPercent": 25,
        "quantity": 10,
        "sizes": [{"name": "M", "quantity": 5}, {"name": "L", "quantity": 5}],
        "topLevelCategory": "Men",
        "secondLevelCategory": "Clothing",
        "thirdLevelCategory": "Shirts",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_product(service: CatalogService) -> Callable[..., Awaitable[Product]]:
    """Create a product from ``product_payload`` overrides."""

    async def _create(**overrides: Any) -> Product:
        return await service.create_product(product_payload(**overrides))

    return _create


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Access ``product_payload`` from tests."""
    return product_payload
