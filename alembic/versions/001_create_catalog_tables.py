"""Create platforms, categories and products tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create platforms, categories and products tables."""
    op.create_table(
        'platforms',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(128), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Category ids are only unique within a platform
    op.create_table(
        'categories',
        sa.Column('platform_id', sa.String(64),
                  sa.ForeignKey('platforms.id', ondelete='CASCADE'), nullable=False),
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('cached_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('platform_id', 'id', name='categories_pk'),
        sa.UniqueConstraint('platform_id', 'name', name='categories_platform_name_uidx'),
        sa.CheckConstraint('cached_count >= 0', name='categories_cached_count_check'),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('slug', sa.String(128), nullable=False),
        sa.Column('name', sa.String(256), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, server_default=''),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('original_price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('discount', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('platform_id', sa.String(64),
                  sa.ForeignKey('platforms.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('category_id', sa.String(64), nullable=False),
        sa.Column('rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('review_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sold', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('image', sa.String(512), nullable=True),
        sa.Column('author', sa.String(128), nullable=False),
        sa.Column('author_id', sa.String(64), nullable=True),
        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_new', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('tags', postgresql.ARRAY(sa.String(64)), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('price >= 0', name='products_price_check'),
        sa.CheckConstraint('discount >= 0 AND discount <= 100', name='products_discount_check'),
        sa.CheckConstraint('rating >= 0 AND rating <= 5', name='products_rating_check'),
    )

    for name, column in (
        ('products_slug_idx', 'slug'),
        ('products_platform_idx', 'platform_id'),
        ('products_category_idx', 'category_id'),
        ('products_price_idx', 'price'),
        ('products_discount_idx', 'discount'),
        ('products_featured_idx', 'is_featured'),
        ('products_new_idx', 'is_new'),
        ('products_rating_idx', 'rating'),
        ('products_review_count_idx', 'review_count'),
        ('products_sold_idx', 'sold'),
    ):
        op.create_index(name, 'products', [column])

    op.create_index('products_tags_idx', 'products', ['tags'], postgresql_using='gin')


def downgrade() -> None:
    """Drop catalog tables."""
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_table('platforms')
