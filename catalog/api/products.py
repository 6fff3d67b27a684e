from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from catalog.api.dependencies import get_product_service
from catalog.schemas import MessageResponse, ProductFields, ProductResponse
from catalog.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


def product_fields_form(
    category_name: Optional[str] = Form(None, alias="categoryName"),
    sub_category_name: Optional[str] = Form(None, alias="subCategoryName"),
    sub_sub_category_name: Optional[str] = Form(None, alias="subSubCategoryName"),
    title: Optional[str] = Form(None),
    short_description: Optional[str] = Form(None, alias="shortDescription", description="Comma-joined"),
    bullet_points: Optional[str] = Form(None, alias="bulletPoints", description="Comma-joined"),
    brand: Optional[str] = Form(None),
    brand_image: Optional[str] = Form(None, alias="brandImage"),
    model_number: Optional[str] = Form(None, alias="modelNumber"),
    price: Optional[str] = Form(None),
    offer_price: Optional[str] = Form(None, alias="offerPrice"),
    discount: Optional[str] = Form(None, description="Percentage"),
    full_description: Optional[str] = Form(None, alias="fullDescription"),
    active: Optional[bool] = Form(None),
    is_draft: Optional[bool] = Form(None, alias="isDraft"),
) -> ProductFields:
    return ProductFields(
        category_name=category_name,
        sub_category_name=sub_category_name,
        sub_sub_category_name=sub_sub_category_name,
        title=title,
        short_description=short_description,
        bullet_points=bullet_points,
        brand=brand,
        brand_image=brand_image,
        model_number=model_number,
        price=price,
        offer_price=offer_price,
        discount=discount,
        full_description=full_description,
        active=active,
        is_draft=is_draft,
    )


async def read_upload(upload: Optional[UploadFile]) -> Optional[bytes]:
    if upload is None:
        return None
    return await upload.read()


async def read_uploads(uploads: Optional[List[UploadFile]]) -> List[bytes]:
    return [await upload.read() for upload in uploads or []]


@router.post("/add", response_model=ProductResponse, status_code=201)
async def create_product(
    fields: ProductFields = Depends(product_fields_form),
    thumbnail_image: Optional[UploadFile] = File(None, alias="thumbnailImage"),
    images: Optional[List[UploadFile]] = File(None),
    service: ProductService = Depends(get_product_service),
):
    """Create a product from form fields, a thumbnail and one or more images."""
    product = await service.create_product(
        fields, await read_upload(thumbnail_image), await read_uploads(images)
    )
    return ProductResponse.model_validate(product)


@router.get("/all", response_model=List[ProductResponse])
async def list_products(service: ProductService = Depends(get_product_service)):
    """List every product, unpaginated."""
    products = await service.list_products()
    return [ProductResponse.model_validate(p) for p in products]


@router.put("/toggle-active/{product_id}", response_model=ProductResponse)
async def toggle_product_active(product_id: str, service: ProductService = Depends(get_product_service)):
    """Flip the active flag of a product."""
    product = await service.toggle_active(product_id)
    return ProductResponse.model_validate(product)


@router.get("/category/{category_name}", response_model=List[ProductResponse])
async def list_products_by_category(category_name: str, service: ProductService = Depends(get_product_service)):
    products = await service.list_by_category(category_name)
    return [ProductResponse.model_validate(p) for p in products]


@router.get(
    "/category/{category_name}/subcategory/{sub_category_name}",
    response_model=List[ProductResponse],
)
async def list_products_by_subcategory(
    category_name: str,
    sub_category_name: str,
    service: ProductService = Depends(get_product_service),
):
    """Products in a category/subcategory pair; 404 when there are none."""
    products = await service.list_by_subcategory(category_name, sub_category_name)
    return [ProductResponse.model_validate(p) for p in products]


@router.put("/update/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    fields: ProductFields = Depends(product_fields_form),
    thumbnail_image: Optional[UploadFile] = File(None, alias="thumbnailImage"),
    images: Optional[List[UploadFile]] = File(None),
    service: ProductService = Depends(get_product_service),
):
    """Update supplied fields; uploaded images or thumbnail replace the stored ones."""
    product = await service.update_product(
        product_id, fields, await read_upload(thumbnail_image), await read_uploads(images)
    )
    return ProductResponse.model_validate(product)


@router.delete("/delete/{product_id}", response_model=MessageResponse)
async def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """Delete a product and its image media."""
    await service.delete_product(product_id)
    return MessageResponse(message="Product deleted successfully", product_id=product_id)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """Get a single product by its identifier."""
    product = await service.get_product(product_id)
    return ProductResponse.model_validate(product)
