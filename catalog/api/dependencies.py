from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config import get_settings
from catalog.database import get_db
from catalog.services.media_store import MediaStore
from catalog.services.product_repository import ProductRepository
from catalog.services.product_service import ProductService
from catalog.tasks.media_cleanup import schedule_media_purge


def get_media_store(request: Request) -> MediaStore:
    """Media store built once in the app lifespan."""
    return request.app.state.media_store


def get_orphan_sink() -> Callable[[str], None]:
    return schedule_media_purge


def get_product_service(
    db: AsyncSession = Depends(get_db),
    media_store: MediaStore = Depends(get_media_store),
    orphan_sink: Callable[[str], None] = Depends(get_orphan_sink),
) -> ProductService:
    settings = get_settings()
    return ProductService(
        ProductRepository(db),
        media_store,
        media_folder=settings.media_folder,
        id_allocation_attempts=settings.id_allocation_attempts,
        orphan_sink=orphan_sink,
    )
