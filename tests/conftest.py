"""Shared fixtures: per-test SQLite database, sessions, managers and an API client."""

import os

# 앱 모듈 임포트 전에 MySQL 대신 SQLite를 쓰도록 설정
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("OTEL_ENABLED", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from catalog.config.database import Base, get_read_db, get_write_db
from catalog.models.category import Category
from catalog.services.category_manager import CategoryManager
from catalog.services.product_manager import ProductManager


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Create a file-backed SQLite engine with SAVEPOINT support."""
    db_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")

    # pysqlite 드라이버의 자체 트랜잭션 처리를 끄고 BEGIN을 직접 보냄 (begin_nested 지원)
    @event.listens_for(db_engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(db_engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    import catalog.models  # noqa: F401

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """Create an async HTTP client bound to the app with test sessions."""
    from catalog.main import app

    async def override_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_write_db] = override_db
    app.dependency_overrides[get_read_db] = override_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def category_manager(db_session):
    return CategoryManager(db_session)


@pytest.fixture
def product_manager(db_session):
    return ProductManager(db_session)


@pytest.fixture
def make_category(category_manager):
    """Create a category; parent is given by the parent Category object."""

    async def _make(slug, parent=None, name=None, **flags):
        return await category_manager.create_category(
            name=name or slug.title(),
            slug=slug,
            parent_id=parent.id if parent is not None else None,
            **flags,
        )

    return _make


@pytest.fixture
def make_product(product_manager):
    """Create a product in the given category."""

    async def _make(slug, category, price=1000, **fields):
        data = {"name": fields.pop("name", slug.title()), "slug": slug, "price": price, "category_id": category.id}
        data.update(fields)
        return await product_manager.create_product(data)

    return _make


async def stored_counts(session):
    """desc_product_count by slug, read straight from the table."""
    result = await session.execute(select(Category.slug, Category.desc_product_count))
    return {slug: count for slug, count in result.all()}


async def stored_counts_by_id(session):
    result = await session.execute(select(Category.id, Category.desc_product_count))
    return {category_id: count for category_id, count in result.all()}


@pytest.fixture
def counts(db_session):
    async def _counts():
        return await stored_counts(db_session)

    return _counts


@pytest.fixture
def counts_by_id(db_session):
    async def _counts():
        return await stored_counts_by_id(db_session)

    return _counts
