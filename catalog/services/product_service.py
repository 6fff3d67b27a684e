"""
Product service.

Orchestrates the identifier allocator, the media store and the record store
for every catalog operation. Media uploads and record writes are awaited one
after the other; nothing here is transactional across the two stores, so
failures after an upload are compensated by deleting what was uploaded and
failures while deleting old media are handed to ``orphan_sink``.
"""
import logging
from typing import Callable, Dict, List, Optional, Sequence

from catalog.exceptions import (
    CatalogError,
    DuplicateKeyError,
    MediaError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from catalog.models.product import Product
from catalog.schemas import ProductFields
from catalog.services.media_store import MediaStore, media_key_from_url
from catalog.services.product_repository import ProductRepository
from catalog.utils.identifiers import next_product_id
from catalog.utils.product_fields import compute_offer_price, parse_decimal, split_comma_list

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("category_name", "title", "brand", "brand_image", "model_number", "price")
LIST_FIELDS = ("short_description", "bullet_points")


class ProductService:
    def __init__(
        self,
        repository: ProductRepository,
        media_store: MediaStore,
        *,
        media_folder: str = "matrixsol",
        id_allocation_attempts: int = 5,
        orphan_sink: Optional[Callable[[str], None]] = None,
    ):
        self.repository = repository
        self.media_store = media_store
        self.media_folder = media_folder
        self.id_allocation_attempts = id_allocation_attempts
        self.orphan_sink = orphan_sink

    # Queries

    async def list_products(self) -> List[Product]:
        return await self.repository.find()

    async def get_product(self, product_id: str) -> Product:
        product = await self.repository.find_one({"product_id": product_id})
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    async def list_by_category(self, category_name: str) -> List[Product]:
        return await self.repository.find({"category_name": category_name})

    async def list_by_subcategory(self, category_name: str, sub_category_name: str) -> List[Product]:
        products = await self.repository.find(
            {"category_name": category_name, "sub_category_name": sub_category_name}
        )
        if not products:
            raise NotFoundError(f"No products found in {category_name} / {sub_category_name}")
        return products

    # Commands

    async def create_product(
        self,
        fields: ProductFields,
        thumbnail: Optional[bytes],
        images: Optional[Sequence[bytes]],
    ) -> Product:
        """
        Upload media, allocate an identifier and persist a new product.

        Everything that can be validated is validated before the first upload.

        Raises:
            ValidationError: Missing thumbnail/images/required field, bad number,
                or a model number already in use
            MediaError: An upload failed
            StorageError: The record could not be written (uploads are rolled back)
        """
        if not thumbnail:
            raise ValidationError("Product thumbnail image is required")
        images = [blob for blob in images or [] if blob]
        if not images:
            raise ValidationError("At least one product image is required")

        values = fields.supplied()
        missing = [name for name in REQUIRED_FIELDS if not values.get(name)]
        if missing:
            raise ValidationError("Missing required fields: {}".format(", ".join(missing)))
        self._validate_numbers(values)
        if await self.repository.model_number_taken(values["model_number"]):
            raise ValidationError(f"Product with model number '{values['model_number']}' already exists")

        for name in LIST_FIELDS:
            values[name] = split_comma_list(values.get(name))
        values.setdefault("active", False)
        values.setdefault("is_draft", False)
        if not values.get("offer_price"):
            values["offer_price"] = compute_offer_price(values.get("price"), values.get("discount"))

        uploaded: List[str] = []
        try:
            values["thumbnail_image"] = await self._upload(thumbnail, uploaded)
            values["images"] = [await self._upload(blob, uploaded) for blob in images]
            product = await self._insert_with_new_id(values)
        except CatalogError:
            await self._discard_uploads(uploaded)
            raise

        logger.info("Created product %s (%d images)", product.product_id, len(product.images))
        return product

    async def toggle_active(self, product_id: str) -> Product:
        product = await self.get_product(product_id)
        updated = await self.repository.find_one_and_update(
            {"product_id": product_id}, {"active": not product.active}
        )
        if updated is None:
            raise NotFoundError(f"Product {product_id} not found")
        logger.info("Product %s active=%s", product_id, updated.active)
        return updated

    async def update_product(
        self,
        product_id: str,
        fields: ProductFields,
        thumbnail: Optional[bytes] = None,
        images: Optional[Sequence[bytes]] = None,
    ) -> Product:
        """
        Replace the supplied fields of a product.

        New images replace the whole stored set: every stored image is deleted
        from the media host before the new ones are uploaded. Without new
        images the stored URLs are kept and the media host is not touched.
        The thumbnail follows the same rule, and all old media is deleted
        before the first upload.

        If a later step fails, the new uploads are deleted again and the
        record stops referencing media that was already removed.

        Raises:
            NotFoundError: No product with this identifier
            ValidationError: Bad number or model number owned by another product
            MediaError: A delete or upload failed
        """
        product = await self.get_product(product_id)
        images = [blob for blob in images or [] if blob]

        patch = fields.supplied()
        blank = [name for name in REQUIRED_FIELDS if name in patch and not patch[name]]
        if blank:
            raise ValidationError("Fields cannot be blank: {}".format(", ".join(blank)))
        self._validate_numbers(patch)
        new_model_number = patch.get("model_number")
        if new_model_number and new_model_number != product.model_number:
            if await self.repository.model_number_taken(new_model_number, exclude_product_id=product_id):
                raise ValidationError(f"Product with model number '{new_model_number}' already exists")

        for name in LIST_FIELDS:
            if name in patch:
                patch[name] = split_comma_list(patch[name])

        if "offer_price" not in patch:
            offer_price = compute_offer_price(
                patch.get("price", product.price), patch.get("discount", product.discount)
            )
            if offer_price is not None:
                patch["offer_price"] = offer_price
            elif "discount" in patch:
                # a cleared discount leaves nothing to derive from
                patch["offer_price"] = None

        # References to media already deleted, for the failure path
        dropped: Dict[str, object] = {}
        uploaded: List[str] = []
        try:
            if images:
                stored = list(product.images or [])
                for index, url in enumerate(stored):
                    await self.media_store.delete(media_key_from_url(url))
                    dropped["images"] = stored[index + 1:]
            if thumbnail and product.thumbnail_image:
                await self.media_store.delete(media_key_from_url(product.thumbnail_image))
                dropped["thumbnail_image"] = ""

            if images:
                patch["images"] = [await self._upload(blob, uploaded) for blob in images]
            if thumbnail:
                patch["thumbnail_image"] = await self._upload(thumbnail, uploaded)

            updated = await self.repository.find_one_and_update({"product_id": product_id}, patch)
            if updated is None:
                raise NotFoundError(f"Product {product_id} not found")
        except CatalogError:
            await self._discard_uploads(uploaded)
            await self._drop_media_references(product_id, dropped)
            raise

        logger.info("Updated product %s fields=%s", product_id, sorted(patch))
        return updated

    async def delete_product(self, product_id: str) -> Product:
        """
        Delete the record, then its image media.

        The record stays deleted even if media cleanup fails; failed keys are
        passed to ``orphan_sink`` for a later retry.
        """
        product = await self.repository.find_one_and_delete({"product_id": product_id})
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")

        for url in product.images or []:
            key = media_key_from_url(url)
            try:
                await self.media_store.delete(key)
            except MediaError as exc:
                logger.warning("Could not delete media %s of product %s: %s", key, product_id, exc)
                self._report_orphan(key)

        logger.info("Deleted product %s", product_id)
        return product

    # Helpers

    @staticmethod
    def _validate_numbers(values: Dict[str, object]) -> None:
        for name in ("price", "offer_price", "discount"):
            if values.get(name):
                parse_decimal(name, values[name])

    async def _upload(self, blob: bytes, uploaded: List[str]) -> str:
        url = await self.media_store.upload(blob, self.media_folder)
        uploaded.append(url)
        return url

    async def _insert_with_new_id(self, values: Dict[str, object]) -> Product:
        """Insert under the first free identifier, re-allocating on collision."""
        for attempt in range(1, self.id_allocation_attempts + 1):
            product_id = next_product_id(await self.repository.list_product_ids())
            try:
                return await self.repository.insert(dict(values, product_id=product_id))
            except DuplicateKeyError:
                if await self.repository.model_number_taken(values["model_number"]):
                    raise ValidationError(f"Product with model number '{values['model_number']}' already exists")
                logger.warning(
                    "Identifier %s was taken concurrently (attempt %d/%d)",
                    product_id, attempt, self.id_allocation_attempts,
                )
        raise StorageError(f"Could not allocate a product identifier after {self.id_allocation_attempts} attempts")

    async def _discard_uploads(self, urls: List[str]) -> None:
        for url in urls:
            key = media_key_from_url(url)
            try:
                await self.media_store.delete(key)
            except MediaError as exc:
                logger.warning("Could not discard uploaded media %s: %s", key, exc)
                self._report_orphan(key)

    async def _drop_media_references(self, product_id: str, dropped: Dict[str, object]) -> None:
        """Point a failed update's record away from media that is already gone."""
        if not dropped:
            return
        try:
            await self.repository.find_one_and_update({"product_id": product_id}, dropped)
        except StorageError as exc:
            logger.error("Product %s still references deleted media %s: %s", product_id, sorted(dropped), exc)
        else:
            logger.warning("Product %s lost deleted media references %s", product_id, sorted(dropped))

    def _report_orphan(self, key: str) -> None:
        if self.orphan_sink is not None:
            self.orphan_sink(key)
