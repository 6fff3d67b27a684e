from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Product Schemas
class ProductFields(CamelModel):
    """Scalar product fields as submitted with a create or update form.

    Every field is optional here; create enforces the required ones and update
    only replaces what was supplied. Description and bullet points arrive
    comma-joined. Surrounding whitespace is stripped, so a whitespace-only
    value counts as blank.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    category_name: Optional[str] = None
    sub_category_name: Optional[str] = None
    sub_sub_category_name: Optional[str] = None
    title: Optional[str] = None
    short_description: Optional[str] = None
    bullet_points: Optional[str] = None
    brand: Optional[str] = None
    brand_image: Optional[str] = None
    model_number: Optional[str] = None
    price: Optional[str] = None
    offer_price: Optional[str] = None
    discount: Optional[str] = None
    full_description: Optional[str] = None
    active: Optional[bool] = None
    is_draft: Optional[bool] = None

    def supplied(self) -> dict:
        """Fields the caller actually sent, keyed by attribute name."""
        return self.model_dump(exclude_none=True)


class ProductResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    product_id: str
    category_name: str
    sub_category_name: Optional[str] = None
    sub_sub_category_name: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    thumbnail_image: str
    title: str
    short_description: List[str] = Field(default_factory=list)
    bullet_points: List[str] = Field(default_factory=list)
    brand: str
    brand_image: str
    model_number: str
    price: str
    offer_price: Optional[str] = None
    discount: Optional[str] = None
    full_description: Optional[str] = None
    active: bool
    is_draft: bool
    created_at: datetime
    updated_at: datetime


class MessageResponse(CamelModel):
    message: str
    product_id: Optional[str] = None
