"""Record store for products, backed by an async SQLAlchemy session."""
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.exceptions import DuplicateKeyError, StorageError
from catalog.models.product import Product

logger = logging.getLogger(__name__)


class ProductRepository:
    """Find/insert/update/delete products by field match.

    Filters are plain dicts of column attribute name to expected value, all
    combined with AND.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _storage_errors(self, action: str):
        try:
            yield
        except IntegrityError as exc:
            await self.session.rollback()
            logger.warning("Unique constraint violated while trying to %s: %s", action, exc.orig)
            raise DuplicateKeyError(f"Unique constraint violated while trying to {action}") from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Record store failed to %s", action, exc_info=True)
            raise StorageError(f"Failed to {action}") from exc

    @staticmethod
    def _where(filters: Optional[Dict[str, Any]]):
        conditions = [getattr(Product, field) == value for field, value in (filters or {}).items()]
        return and_(*conditions) if conditions else None

    async def find(self, filters: Optional[Dict[str, Any]] = None, order_by=Product.product_id) -> List[Product]:
        query = select(Product)
        where = self._where(filters)
        if where is not None:
            query = query.where(where)
        if order_by is not None:
            query = query.order_by(order_by)

        async with self._storage_errors("list products"):
            result = await self.session.execute(query)
            return list(result.scalars().all())

    async def find_one(self, filters: Dict[str, Any]) -> Optional[Product]:
        async with self._storage_errors("fetch product"):
            result = await self.session.execute(select(Product).where(self._where(filters)))
            return result.scalars().first()

    async def list_product_ids(self) -> List[str]:
        async with self._storage_errors("read product identifiers"):
            result = await self.session.execute(select(Product.product_id).order_by(Product.product_id))
            return list(result.scalars().all())

    async def model_number_taken(self, model_number: str, exclude_product_id: Optional[str] = None) -> bool:
        query = select(Product.id).where(Product.model_number == model_number)
        if exclude_product_id is not None:
            query = query.where(Product.product_id != exclude_product_id)

        async with self._storage_errors("check model number"):
            result = await self.session.execute(query.limit(1))
            return result.scalar_one_or_none() is not None

    async def insert(self, values: Dict[str, Any]) -> Product:
        product = Product(**values)
        async with self._storage_errors("insert product"):
            self.session.add(product)
            await self.session.commit()
            await self.session.refresh(product)
        return product

    async def find_one_and_update(self, filters: Dict[str, Any], patch: Dict[str, Any]) -> Optional[Product]:
        async with self._storage_errors("update product"):
            result = await self.session.execute(select(Product).where(self._where(filters)))
            product = result.scalars().first()
            if product is None:
                return None
            for field, value in patch.items():
                setattr(product, field, value)
            await self.session.commit()
            await self.session.refresh(product)
        return product

    async def find_one_and_delete(self, filters: Dict[str, Any]) -> Optional[Product]:
        async with self._storage_errors("delete product"):
            result = await self.session.execute(select(Product).where(self._where(filters)))
            product = result.scalars().first()
            if product is None:
                return None
            await self.session.delete(product)
            await self.session.commit()
        return product
