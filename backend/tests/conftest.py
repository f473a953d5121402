"""
Shared test fixtures.

Uses an in-memory SQLite database for fast testing.
JSONB columns are compiled as JSON for SQLite compatibility.
For integration tests against PostgreSQL, use docker compose.
"""

from datetime import date
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.ext.compiler import compiles

from pricebook.core.database import Base, get_db
from pricebook.main import app
from pricebook.models.catalog import Product, ProductGroup, ProductMapping, Supplier
from pricebook.models.purchasing import ImportBatch, PurchaseHistory  # noqa: F401


# ─── SQLite compatibility: JSONB → JSON ───────────────────────

@compiles(JSONB, "sqlite")
def compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"


# Use SQLite async for tests (aiosqlite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(TEST_DATABASE_URL, echo=False)
test_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a test database session."""
    async with test_session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide a test HTTP client with database override."""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ─── Helper factories ─────────────────────────────────────────

@pytest_asyncio.fixture
async def make_supplier(db_session: AsyncSession):
    """Factory fixture for creating suppliers."""
    async def _make(code: str = "SUP-1", name: str = "Siam Chemicals", status: str = "active") -> Supplier:
        supplier = Supplier(code=code, name=name, status=status)
        db_session.add(supplier)
        await db_session.flush()
        await db_session.refresh(supplier)
        return supplier
    return _make


@pytest_asyncio.fixture
async def make_product(db_session: AsyncSession):
    """Factory fixture for creating products."""
    async def _make(
        supplier: Supplier,
        product_code: str = "P-001",
        product_name: str = "Citric Acid 25kg",
        price: float | None = 100.0,
        unit: str | None = "bag",
        effective_date: date | None = date(2024, 1, 1),
        status: str = "active",
    ) -> Product:
        product = Product(
            supplier_id=supplier.id,
            product_code=product_code,
            product_name=product_name,
            price=price,
            unit=unit,
            effective_date=effective_date,
            status=status,
        )
        db_session.add(product)
        await db_session.flush()
        await db_session.refresh(product)
        return product
    return _make


@pytest_asyncio.fixture
async def make_group(db_session: AsyncSession):
    """Factory fixture for creating product groups."""
    async def _make(master_code: str = "G-001", master_name: str = "citric acid", unit: str | None = None) -> ProductGroup:
        group = ProductGroup(master_code=master_code, master_name=master_name, unit=unit)
        db_session.add(group)
        await db_session.flush()
        await db_session.refresh(group)
        return group
    return _make


@pytest_asyncio.fixture
async def make_mapping(db_session: AsyncSession):
    """Factory fixture for mapping a product onto a group."""
    async def _make(product: Product, group: ProductGroup) -> ProductMapping:
        mapping = ProductMapping(product_id=product.id, product_group_id=group.id)
        db_session.add(mapping)
        await db_session.flush()
        return mapping
    return _make
