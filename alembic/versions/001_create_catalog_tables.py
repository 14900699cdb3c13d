"""Create categories, products and product_sizes tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create categories, products and product_sizes tables."""
    # Categories table
    op.create_table(
        'categories',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('parent_category_id', sa.String(36),
                  sa.ForeignKey('categories.id'), nullable=True, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Top-level names are unique catalog-wide
    op.create_index(
        'uq_categories_root_name',
        'categories',
        ['name'],
        unique=True,
        postgresql_where=sa.text('level = 1'),
    )

    # Lower-level names are unique within their parent
    op.create_index(
        'uq_categories_parent_name',
        'categories',
        ['name', 'parent_category_id'],
        unique=True,
        postgresql_where=sa.text('parent_category_id IS NOT NULL'),
    )

    # Products table
    op.create_table(
        'products',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('brand', sa.String(100), nullable=True, index=True),
        sa.Column('image_url', sa.String(1000), nullable=True),
        sa.Column('color', sa.String(50), nullable=True, index=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=True),
        sa.Column('discounted_price', sa.Numeric(12, 2), nullable=True, index=True),
        sa.Column('discount_percent', sa.Numeric(5, 2), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('category_id', sa.String(36),
                  sa.ForeignKey('categories.id'), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Product sizes table
    op.create_table(
        'product_sizes',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('product_id', sa.String(36),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(50), nullable=False, index=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )


def downgrade() -> None:
    """Drop product_sizes, products and categories tables."""
    op.drop_table('product_sizes')
    op.drop_table('products')
    op.drop_index('uq_categories_parent_name', table_name='categories')
    op.drop_index('uq_categories_root_name', table_name='categories')
    op.drop_table('categories')
