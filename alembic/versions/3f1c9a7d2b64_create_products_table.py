"""Create products table

Revision ID: 3f1c9a7d2b64
Revises:
Create Date: 2026-10-18 10:12:41.502217

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c9a7d2b64'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.String(length=32), nullable=False),
        sa.Column('category_name', sa.String(length=255), nullable=False),
        sa.Column('sub_category_name', sa.String(length=255), nullable=True),
        sa.Column('sub_sub_category_name', sa.String(length=255), nullable=True),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('thumbnail_image', sa.String(length=1024), nullable=False),
        sa.Column('title', sa.String(length=512), nullable=False),
        sa.Column('short_description', sa.JSON(), nullable=False),
        sa.Column('bullet_points', sa.JSON(), nullable=False),
        sa.Column('brand', sa.String(length=255), nullable=False),
        sa.Column('brand_image', sa.String(length=1024), nullable=False),
        sa.Column('model_number', sa.String(length=255), nullable=False),
        sa.Column('price', sa.String(length=64), nullable=False),
        sa.Column('offer_price', sa.String(length=64), nullable=True),
        sa.Column('discount', sa.String(length=64), nullable=True),
        sa.Column('full_description', sa.Text(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_draft', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    # Unique indexes back the identifier-collision retry and the model number check
    op.create_index('ix_products_product_id', 'products', ['product_id'], unique=True)
    op.create_index('ix_products_model_number', 'products', ['model_number'], unique=True)
    op.create_index('ix_products_category_name', 'products', ['category_name'])
    op.create_index('ix_products_sub_category_name', 'products', ['sub_category_name'])
    op.create_index('ix_products_active', 'products', ['active'])


def downgrade() -> None:
    op.drop_table('products')
