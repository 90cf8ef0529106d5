"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from uuid import UUID

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from channel_migrator.config import Settings
from channel_migrator.db.store import DestinationStore
from channel_migrator.models import Base
from channel_migrator.repositories.migration_repo import MigrationRepository
from channel_migrator.schemas.source import SourceEntity

# In-memory SQLite stands in for PostgreSQL; the auth schema is folded into main
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
def settings() -> Settings:
    """Settings with a small fan-out bound."""
    return Settings(insert_concurrency=2)


@pytest_asyncio.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with the destination schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        execution_options={"schema_translate_map": {"auth": None}},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_conn(db_engine: AsyncEngine) -> AsyncGenerator[AsyncConnection, None]:
    """Connection the store runs on."""
    async with db_engine.connect() as conn:
        yield conn


@pytest.fixture
def store(db_conn: AsyncConnection) -> DestinationStore:
    return DestinationStore(db_conn)


@pytest.fixture
def repo(store: DestinationStore, settings: Settings) -> MigrationRepository:
    return MigrationRepository(store, settings)


@pytest.fixture
def fixed_ids() -> list[UUID]:
    """Deterministic user ids, one per entity."""
    return [UUID(int=n) for n in range(1, 21)]


def make_entity(
    user_id: str,
    channel: dict | None = None,
    tracks: list[dict] | None = None,
    providers: list[str] | None = None,
) -> SourceEntity:
    """Build a source entity from export-shaped dicts."""
    data = {
        "user": {
            "localId": user_id,
            "email": f"{user_id.lower()}@example.com",
            "createdAt": "1580515200000",
            "passwordHash": f"hash-{user_id}",
            "providerUserInfo": [{"providerId": p} for p in providers or []],
        },
        "channel": channel,
        "tracks": tracks,
    }
    return SourceEntity.model_validate(data)


def make_channel(slug: str, title: str | None = None) -> dict:
    return {
        "title": title or slug.replace("-", " ").title(),
        "slug": slug,
        "body": f"About {slug}",
        "created": 1580515200000,
        "updated": 1580601600000,
        "link": f"https://{slug}.example.com",
        "image": f"{slug}.jpg",
    }


def make_track(n: int, url: str | None = "auto") -> dict:
    return {
        "url": f"https://www.youtube.com/watch?v=track{n}" if url == "auto" else url,
        "title": f"Track {n}",
        "body": f"Notes {n}",
        "created": datetime(2020, 2, n, tzinfo=UTC).isoformat(),
    }
