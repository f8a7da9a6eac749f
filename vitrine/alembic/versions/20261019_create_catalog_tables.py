"""create catalog tables

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '1a2b3c4d5e6f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _child_id() -> sa.Column:
    return sa.Column(
        'id',
        sa.BigInteger().with_variant(sa.Integer(), 'sqlite'),
        primary_key=True,
        autoincrement=True,
    )


def _product_fk() -> sa.Column:
    return sa.Column(
        'product_id',
        sa.Uuid(),
        sa.ForeignKey('products.id', ondelete='CASCADE'),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('headline', sa.String(length=500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('hero_image', sa.String(length=1024), nullable=True),
        sa.Column('hero_alt', sa.String(length=500), nullable=True),
        sa.Column('seo_title', sa.String(length=500), nullable=True),
        sa.Column('seo_description', sa.Text(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sa_orm_sentinel', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_categories_slug', 'categories', ['slug'], unique=True)
    op.create_index('ix_categories_position', 'categories', ['position'])

    op.create_table(
        'category_highlights',
        _child_id(),
        sa.Column(
            'category_id',
            sa.Uuid(),
            sa.ForeignKey('categories.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('text', sa.String(length=500), nullable=False),
    )
    op.create_index('ix_category_highlights_category_id', 'category_highlights', ['category_id'])

    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('designer', sa.String(length=255), nullable=True),
        sa.Column('dimensions', sa.String(length=255), nullable=True),
        sa.Column('light_source', sa.String(length=255), nullable=True),
        sa.Column('lead_time', sa.String(length=255), nullable=True),
        sa.Column('warranty', sa.String(length=255), nullable=True),
        sa.Column('sa_orm_sentinel', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_slug', 'products', ['slug'], unique=True)
    op.create_index('ix_products_category_id', 'products', ['category_id'])
    op.create_index('ix_products_name', 'products', ['name'])

    op.create_table(
        'product_media',
        _child_id(),
        _product_fk(),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('src', sa.String(length=1024), nullable=False),
        sa.Column('alt', sa.String(length=500), nullable=True),
    )
    op.create_table(
        'product_materials',
        _child_id(),
        _product_fk(),
        sa.Column('name', sa.String(length=255), nullable=False),
    )
    op.create_table(
        'product_finish_options',
        _child_id(),
        _product_fk(),
        sa.Column('name', sa.String(length=255), nullable=False),
    )
    op.create_table(
        'product_customizations',
        _child_id(),
        _product_fk(),
        sa.Column('description', sa.Text(), nullable=False),
    )
    op.create_table(
        'product_assets',
        _child_id(),
        _product_fk(),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('url', sa.String(length=1024), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
    )
    for table in (
        'product_media',
        'product_materials',
        'product_finish_options',
        'product_customizations',
        'product_assets',
    ):
        op.create_index(f'ix_{table}_product_id', table, ['product_id'])


def downgrade() -> None:
    for table in (
        'product_assets',
        'product_customizations',
        'product_finish_options',
        'product_materials',
        'product_media',
    ):
        op.drop_index(f'ix_{table}_product_id', table_name=table)
        op.drop_table(table)

    op.drop_index('ix_products_name', table_name='products')
    op.drop_index('ix_products_category_id', table_name='products')
    op.drop_index('ix_products_slug', table_name='products')
    op.drop_table('products')

    op.drop_index('ix_category_highlights_category_id', table_name='category_highlights')
    op.drop_table('category_highlights')

    op.drop_index('ix_categories_position', table_name='categories')
    op.drop_index('ix_categories_slug', table_name='categories')
    op.drop_table('categories')
