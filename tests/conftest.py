from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cardtracker.api.deps import get_tracker
from cardtracker.db.database import get_session
from cardtracker.db.store import SqlAlchemyStore
from cardtracker.main import app
from cardtracker.models.catalog import Catalog, load_catalog
from cardtracker.models.db import Base
from cardtracker.services.tracker import CardTracker


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session_factory) -> SqlAlchemyStore:
    return SqlAlchemyStore(session_factory)


@pytest.fixture
def catalog_document() -> dict[str, Any]:
    """
    Small catalog covering the capture paths.

    2024 Topps / Base: #1 Alice, #2 Bob; parallels Base (base), Gold /2024
    2024 Topps / Inserts: #I-1 Alice, #I-2 checklist; parallels Base (base), Red /5
    2023 Bowman / Base: #1 Carl; parallel Base
    2024 Prizm / Empty: #1 Dan; no parallels
    """
    return {
        "exported_at": "2024-06-01T12:00:00",
        "products": [
            {
                "sport": "Baseball",
                "year": "2024",
                "name": "2024 Topps",
                "sets": [
                    {
                        "name": "Base",
                        "type": "base",
                        "cards": [
                            {"number": "1", "player": "Alice", "team": "Reds", "rookie": True},
                            {"number": "2", "player": "Bob", "team": "Blues"},
                        ],
                        "parallels": [
                            {"name": "Base", "is_base": True},
                            {"name": "Gold", "serial_numbered": 2024, "color_hex": "#d4af37"},
                        ],
                    },
                    {
                        "name": "Inserts",
                        "type": "insert",
                        "cards": [
                            {"number": "I-1", "player": "Alice", "team": "Reds"},
                            {"number": "I-2", "card_name": "Checklist"},
                        ],
                        "parallels": [
                            {"name": "Base", "is_base": True},
                            {"name": "Red", "serial_numbered": 5},
                        ],
                    },
                ],
            },
            {
                "sport": "Baseball",
                "year": "2023",
                "name": "2023 Bowman",
                "sets": [
                    {
                        "name": "Base",
                        "cards": [{"number": "1", "player": "Carl", "team": "Greens"}],
                        "parallels": [{"name": "Base", "is_base": True}],
                    }
                ],
            },
            {
                "sport": "Football",
                "year": "2024",
                "name": "2024 Prizm",
                "sets": [
                    {
                        "name": "Empty",
                        "cards": [{"number": "1", "player": "Dan"}],
                        "parallels": [],
                    }
                ],
            },
        ],
        "tags": {
            "location": [{"name": "Box A"}, {"name": "Box B", "color_hex": "#0000ff"}],
            "price_bucket": [{"name": "$1-5"}],
            "status": [{"name": "To grade"}],
        },
        "collection": [
            {
                "product": "2024 Topps",
                "set": "Base",
                "card_number": "1",
                "quantity": 2,
                "median_price": 3.5,
            },
            {
                "product": "2024 Topps",
                "set": "Base",
                "card_number": "1",
                "quantity": 1,
                "median_price": 4.0,
                "grade": "PSA 9",
            },
        ],
    }


@pytest.fixture
def catalog(catalog_document) -> Catalog:
    return load_catalog(catalog_document)


@pytest.fixture
def tracker(store) -> CardTracker:
    return CardTracker(store)


@pytest.fixture
async def loaded_tracker(tracker, catalog_document) -> CardTracker:
    await tracker.restore()
    await tracker.load_catalog(catalog_document)
    return tracker


@pytest.fixture
async def session_tracker(loaded_tracker) -> CardTracker:
    """Tracker with an active session on 2024 Topps / Base, parallels Base and Gold, Box A."""
    loaded_tracker.configure_session()
    loaded_tracker.update_session_setup(
        product="2024 Topps",
        sets=["Base"],
        parallels=["Base", "Gold"],
        location="Box A",
    )
    loaded_tracker.start_session()
    return loaded_tracker


@pytest.fixture
async def client(session_factory, tracker):
    """Provide an async test client bound to the test database and tracker."""

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_tracker] = lambda: tracker

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def loaded_client(client: AsyncClient, catalog_document) -> AsyncClient:
    response = await client.post("/catalog", json=catalog_document)
    assert response.status_code == 200
    return client
