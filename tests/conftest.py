"""
Pytest configuration and shared fixtures.
"""
import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from catalog.database import Base, build_session_factory
from catalog.exceptions import MediaError
from catalog.models.product import Product  # noqa: F401 - registers the table
from catalog.schemas import ProductFields
from catalog.services.product_repository import ProductRepository
from catalog.services.product_service import ProductService


class FakeMediaStore:
    """In-memory media host recording every call in order."""

    def __init__(self):
        self.calls = []
        self.deleted = []
        self.fail_upload_at = None
        self.fail_deletes = False
        self._counter = 0

    async def upload(self, blob: bytes, folder: str) -> str:
        if self.fail_upload_at is not None and self._counter >= self.fail_upload_at:
            raise MediaError("upload refused")
        self._counter += 1
        url = f"https://res.cloudinary.com/demo/image/upload/v1/{folder}/img{self._counter:03d}.jpg"
        self.calls.append(("upload", url))
        return url

    async def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        if self.fail_deletes:
            raise MediaError("delete refused")
        self.deleted.append(key)

    def reset(self):
        self.calls.clear()
        self.deleted.clear()


def make_fields(**overrides) -> ProductFields:
    values = {
        "category_name": "Electronics",
        "sub_category_name": "Audio",
        "title": "Studio Headphones",
        "short_description": "Closed back, 40mm drivers",
        "bullet_points": "Foldable,Detachable cable,Carry pouch",
        "brand": "Acme",
        "brand_image": "https://cdn.example.com/brands/acme.png",
        "model_number": "ACM-100",
        "price": "100",
    }
    values.update(overrides)
    return ProductFields(**values)


@pytest.fixture
async def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def repository(session):
    return ProductRepository(session)


@pytest.fixture
def media_store():
    return FakeMediaStore()


@pytest.fixture
def orphans():
    """Keys handed to the orphan sink."""
    return []


@pytest.fixture
def service(repository, media_store, orphans):
    return ProductService(
        repository,
        media_store,
        media_folder="catalog-test",
        id_allocation_attempts=3,
        orphan_sink=orphans.append,
    )
