from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from catalog.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    product_id = Column(String(32), nullable=False, unique=True, index=True)
    category_name = Column(String(255), nullable=False, index=True)
    sub_category_name = Column(String(255), nullable=True, index=True)
    sub_sub_category_name = Column(String(255), nullable=True)
    images = Column(JSON, nullable=False, default=list)
    thumbnail_image = Column(String(1024), nullable=False)
    title = Column(String(512), nullable=False)
    short_description = Column(JSON, nullable=False, default=list)
    bullet_points = Column(JSON, nullable=False, default=list)
    brand = Column(String(255), nullable=False)
    brand_image = Column(String(1024), nullable=False)
    model_number = Column(String(255), nullable=False, unique=True)
    price = Column(String(64), nullable=False)
    offer_price = Column(String(64), nullable=True)
    discount = Column(String(64), nullable=True)
    full_description = Column(Text, nullable=True)
    # The create path defaults this to False as well; see ProductService.create
    active = Column(Boolean, default=False, nullable=False, index=True)
    is_draft = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Product(product_id='{self.product_id}', model_number='{self.model_number}')>"
