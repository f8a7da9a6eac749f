"""Product service: reads and atomic writes of products and their children.

Every child collection (media, materials, finish options, customizations,
assets) is written with full-replace semantics: all existing rows are deleted
and the new set inserted as one batch, inside the same transaction as the
product row. Readers never observe a half-replaced collection.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vitrine.db.models import (
    Category,
    Product,
    ProductAsset,
    ProductCustomization,
    ProductFinishOption,
    ProductMaterial,
    ProductMedia,
)
from vitrine.lib.exceptions import PersistenceError, ProductNotFound, UnknownCategory
from vitrine.lib.payload import ProductPayload, ResolvedMedia

logger = logging.getLogger(__name__)


@dataclass
class ProductUpdate:
    """Result of an update: the reloaded product and media dropped from it."""

    product: Product
    removed_media: list[str] = field(default_factory=list)


def _apply_field_updates(product: Product, updates: dict) -> None:
    for name, value in updates.items():
        setattr(product, name, value)


async def list_products(
    db_session: AsyncSession,
    category_slug: str | None = None,
) -> list[Product]:
    """List products by name, optionally restricted to one category slug."""
    query = select(Product)
    if category_slug:
        query = query.join(Category, Product.category_id == Category.id).where(
            Category.slug == category_slug
        )
    query = query.order_by(Product.name.asc())

    result = await db_session.execute(query)
    return list(result.scalars().all())


async def get_product_by_id(
    db_session: AsyncSession,
    product_id: UUID,
    refresh: bool = False,
) -> Product | None:
    """Get a single product (with children) by ID."""
    query = select(Product).where(Product.id == product_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db_session.execute(query)
    return result.scalar_one_or_none()


async def get_product_by_slug(db_session: AsyncSession, slug: str) -> Product | None:
    """Get a single product (with children) by slug."""
    result = await db_session.execute(select(Product).where(Product.slug == slug))
    return result.scalar_one_or_none()


async def list_media_sources(db_session: AsyncSession) -> list[str]:
    """Return the ``src`` of every media row across all products."""
    result = await db_session.execute(select(ProductMedia.src))
    return list(result.scalars().all())


async def unreferenced_sources(db_session: AsyncSession, sources: Sequence[str]) -> list[str]:
    """Keep only the sources no media row, on any product, still uses."""
    if not sources:
        return []
    result = await db_session.execute(
        select(ProductMedia.src).where(ProductMedia.src.in_(sources)).distinct()
    )
    shared = set(result.scalars().all())
    return [src for src in sources if src not in shared]


async def _ensure_category(db_session: AsyncSession, category_id: UUID) -> None:
    result = await db_session.execute(select(Category.id).where(Category.id == category_id))
    if result.scalar_one_or_none() is None:
        raise UnknownCategory(category_id)


async def _replace_collection(
    db_session: AsyncSession,
    model: type,
    product_id: UUID,
    rows: Sequence[dict],
    clear: bool = True,
) -> None:
    """Delete all rows of ``model`` owned by the product, then batch-insert ``rows``."""
    if clear:
        await db_session.execute(
            delete(model)
            .where(model.product_id == product_id)
            .execution_options(synchronize_session=False)
        )
    if rows:
        await db_session.execute(
            insert(model),
            [{"product_id": product_id, **row} for row in rows],
        )


def _collection_rows(payload: ProductPayload, media) -> list[tuple[type, list[dict] | None]]:
    """Pair each child model with its new rows, ``None`` when not provided."""

    def rows(value, build):
        if value is None:
            return None
        return [build(item) for item in value]

    return [
        (ProductMedia, rows(media, lambda m: {"position": m.position, "src": m.src, "alt": m.alt})),
        (ProductMaterial, rows(payload.provided_list("materials"), lambda name: {"name": name})),
        (ProductFinishOption, rows(payload.provided_list("finish_options"), lambda name: {"name": name})),
        (ProductCustomization, rows(payload.provided_list("customizations"), lambda text: {"description": text})),
        (
            ProductAsset,
            rows(
                payload.provided_list("assets"),
                lambda a: {"type": a.type, "url": a.url, "title": a.title, "description": a.description},
            ),
        ),
    ]


async def _replace_children(
    db_session: AsyncSession,
    product_id: UUID,
    payload: ProductPayload,
    media,
    clear: bool = True,
) -> None:
    # Collections are processed one after another; each delete precedes its insert.
    for model, rows in _collection_rows(payload, media):
        if rows is None:
            continue
        await _replace_collection(db_session, model, product_id, rows, clear=clear)


async def _reload(db_session: AsyncSession, product_id: UUID) -> Product:
    # Child rows were rewritten with bulk statements; drop stale identities first.
    db_session.expunge_all()
    product = await get_product_by_id(db_session, product_id, refresh=True)
    if product is None:
        raise ProductNotFound(product_id)
    return product


async def create_product(
    db_session: AsyncSession,
    payload: ProductPayload,
    media: Sequence[ResolvedMedia] = (),
) -> Product:
    """Create a product with all its child collections in one transaction.

    Collections the payload did not carry are created empty.

    Raises:
        UnknownCategory: the payload references a missing category
        PersistenceError: the transaction failed and was rolled back
    """
    await _ensure_category(db_session, payload.category_id)

    product = Product(slug=payload.slug, name=payload.name, category_id=payload.category_id)
    _apply_field_updates(product, payload.scalar_values())

    try:
        db_session.add(product)
        await db_session.flush()
        await _replace_children(db_session, product.id, payload, list(media), clear=False)
        await db_session.commit()
    except SQLAlchemyError as exc:
        await db_session.rollback()
        logger.warning("Rolled back creation of product %r", payload.slug, exc_info=True)
        raise PersistenceError("Failed to create product") from exc

    logger.info("Created product %s (%s) with %d media", product.slug, product.id, len(media))
    return await _reload(db_session, product.id)


async def update_product(
    db_session: AsyncSession,
    product_id: UUID,
    payload: ProductPayload,
    media: Sequence[ResolvedMedia] | None = None,
) -> ProductUpdate:
    """Update a product and replace the child collections it was given.

    Scalars and collections the payload did not carry keep their stored
    values, as does media when ``media`` is ``None``. Provided collections
    are fully replaced, never merged. When ``media`` is provided, the
    returned ``removed_media`` lists the previous sources absent from the
    new set. Other products may still use them; see
    :func:`unreferenced_sources`.

    Raises:
        ProductNotFound: no product with that id (checked before any write)
        UnknownCategory: the payload references a missing category
        PersistenceError: the transaction failed and was rolled back
    """
    product = await get_product_by_id(db_session, product_id)
    if product is None:
        raise ProductNotFound(product_id)

    if payload.category_id != product.category_id:
        await _ensure_category(db_session, payload.category_id)

    previous_sources = [item.src for item in product.media]
    new_media = list(media) if media is not None else None

    try:
        _apply_field_updates(product, payload.scalar_values())
        await _replace_children(db_session, product.id, payload, new_media)
        await db_session.commit()
    except SQLAlchemyError as exc:
        await db_session.rollback()
        logger.warning("Rolled back update of product %s", product_id, exc_info=True)
        raise PersistenceError("Failed to update product") from exc

    removed: list[str] = []
    if new_media is not None:
        kept = {item.src for item in new_media}
        removed = [src for src in dict.fromkeys(previous_sources) if src not in kept]

    logger.info("Updated product %s (%d media removed)", product_id, len(removed))
    return ProductUpdate(product=await _reload(db_session, product_id), removed_media=removed)


async def delete_product(db_session: AsyncSession, product_id: UUID) -> None:
    """Delete a product and its children.

    Uploaded files stay on disk until the upload reconciler sweeps them.

    Raises:
        ProductNotFound: no product with that id
        PersistenceError: the transaction failed and was rolled back
    """
    product = await get_product_by_id(db_session, product_id)
    if product is None:
        raise ProductNotFound(product_id)

    try:
        await db_session.delete(product)
        await db_session.commit()
    except SQLAlchemyError as exc:
        await db_session.rollback()
        logger.warning("Rolled back deletion of product %s", product_id, exc_info=True)
        raise PersistenceError("Failed to delete product") from exc

    logger.info("Deleted product %s", product_id)
