"""Shared fixtures: in-memory document store, temp local state, API client."""

import io
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.pool import StaticPool

from waterrefill.config import settings
from waterrefill.database import build_engine, build_session_factory, init_db
from waterrefill.main import create_app
from waterrefill.models.station import Coordinate, LocationType, RefillCost, Station
from waterrefill.services.container import ServiceContainer
from waterrefill.services.document_store import SqlDocumentStore
from waterrefill.services.local_store import LocalKeyValueStore
from waterrefill.services.object_storage import FileSystemObjectStorage

LONDON = Coordinate(51.5074, -0.1278)


def make_jpeg(width: int = 64, height: int = 48, color=(30, 120, 200)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="JPEG")
    return buffer.getvalue()


def make_station(**overrides) -> Station:
    fields = dict(
        name="Fountain",
        description="By the gate",
        limitations="",
        coordinate=LONDON,
        location_type=LocationType.WATER_FOUNTAIN,
        cost=RefillCost.FREE,
        photo_references=["stations/abc/1.jpg"],
        date_added=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        added_by_user_id="user-1",
    )
    fields.update(overrides)
    return Station(**fields)


@pytest_asyncio.fixture
async def db_engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def document_store(db_engine):
    return SqlDocumentStore(build_session_factory(db_engine))


@pytest.fixture
def local_store(tmp_path):
    return LocalKeyValueStore(str(tmp_path / "local_state.json"))


@pytest.fixture
def object_storage(tmp_path):
    return FileSystemObjectStorage(str(tmp_path / "blobs"))


@pytest_asyncio.fixture
async def services(db_engine, document_store, object_storage, local_store):
    container = ServiceContainer.from_components(
        document_store, object_storage, local_store, settings, engine=db_engine
    )
    yield container
    container.controller.debouncer.cancel()


@pytest_asyncio.fixture
async def client(services):
    app = create_app(services)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
