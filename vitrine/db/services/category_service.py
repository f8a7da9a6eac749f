"""Category service for CRUD operations on catalog categories."""

import logging
from typing import Literal
from uuid import UUID

from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vitrine.db.models import Category, CategoryHighlight, Product
from vitrine.lib.exceptions import (
    CategoryInUse,
    CategoryNotFound,
    MissingRequiredField,
    PersistenceError,
)
from vitrine.lib.payload import CategoryPayload

logger = logging.getLogger(__name__)

DeletePolicy = Literal["reject", "cascade"]


def _apply_field_updates(category: Category, updates: dict) -> None:
    for field, value in updates.items():
        setattr(category, field, value)


async def list_categories(db_session: AsyncSession) -> list[Category]:
    """List categories in display order."""
    query = select(Category).order_by(Category.position.asc(), Category.name.asc())
    result = await db_session.execute(query)
    return list(result.scalars().all())


async def get_category_by_id(
    db_session: AsyncSession,
    category_id: UUID,
    refresh: bool = False,
) -> Category | None:
    """Get a single category by ID.

    Args:
        db_session: Database session
        category_id: Category UUID
        refresh: Overwrite any copy already held by the session

    Returns:
        Category object or None if not found
    """
    query = select(Category).where(Category.id == category_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db_session.execute(query)
    return result.scalar_one_or_none()


async def get_category_by_slug(db_session: AsyncSession, slug: str) -> Category | None:
    """Get a single category by slug."""
    result = await db_session.execute(select(Category).where(Category.slug == slug))
    return result.scalar_one_or_none()


async def count_category_products(db_session: AsyncSession, category_id: UUID) -> int:
    result = await db_session.execute(
        select(func.count()).select_from(Product).where(Product.category_id == category_id)
    )
    return result.scalar() or 0


async def _replace_highlights(
    db_session: AsyncSession,
    category_id: UUID,
    highlights: list[str],
    clear: bool = True,
) -> None:
    if clear:
        await db_session.execute(
            delete(CategoryHighlight)
            .where(CategoryHighlight.category_id == category_id)
            .execution_options(synchronize_session=False)
        )
    if highlights:
        await db_session.execute(
            insert(CategoryHighlight),
            [{"category_id": category_id, "text": text} for text in highlights],
        )


async def _reload(db_session: AsyncSession, category_id: UUID) -> Category:
    # Child rows were rewritten with bulk statements; drop stale identities first.
    db_session.expunge_all()
    category = await get_category_by_id(db_session, category_id, refresh=True)
    if category is None:
        raise CategoryNotFound(category_id)
    return category


async def create_category(db_session: AsyncSession, payload: CategoryPayload) -> Category:
    """Create a category and its highlights in one transaction.

    Raises:
        MissingRequiredField: slug or name not provided
        PersistenceError: the transaction failed and was rolled back
    """
    missing = [name for name in ("slug", "name") if not payload.provided(name)]
    if missing:
        raise MissingRequiredField(missing)

    category = Category(slug=payload.slug, name=payload.name)
    _apply_field_updates(category, payload.scalar_values())
    highlights = payload.highlights if payload.provided("highlights") else []

    try:
        db_session.add(category)
        await db_session.flush()
        await _replace_highlights(db_session, category.id, highlights, clear=False)
        await db_session.commit()
    except SQLAlchemyError as exc:
        await db_session.rollback()
        logger.warning("Rolled back creation of category %r", payload.slug, exc_info=True)
        raise PersistenceError("Failed to create category") from exc

    logger.info("Created category %s (%s)", category.slug, category.id)
    return await _reload(db_session, category.id)


async def update_category(
    db_session: AsyncSession,
    category_id: UUID,
    payload: CategoryPayload,
) -> Category:
    """Update a category.

    Scalar fields the payload did not carry are untouched. Highlights are replaced as a
    whole when provided (an empty list clears them) and untouched otherwise.

    Raises:
        CategoryNotFound: no category with that id
        PersistenceError: the transaction failed and was rolled back
    """
    category = await get_category_by_id(db_session, category_id)
    if category is None:
        raise CategoryNotFound(category_id)

    try:
        _apply_field_updates(category, payload.scalar_values())
        if payload.provided("highlights"):
            await _replace_highlights(db_session, category.id, payload.highlights)
        await db_session.commit()
    except SQLAlchemyError as exc:
        await db_session.rollback()
        logger.warning("Rolled back update of category %s", category_id, exc_info=True)
        raise PersistenceError("Failed to update category") from exc

    logger.info("Updated category %s", category_id)
    return await _reload(db_session, category_id)


async def delete_category(
    db_session: AsyncSession,
    category_id: UUID,
    policy: DeletePolicy = "reject",
) -> None:
    """Delete a category.

    With ``policy="reject"`` a category that still has products raises
    :class:`CategoryInUse`. With ``policy="cascade"`` its products (and their
    children) are deleted in the same transaction. Uploaded files of
    cascaded products are left for the upload reconciler.

    Raises:
        CategoryNotFound: no category with that id
        CategoryInUse: products reference it and policy is "reject"
        PersistenceError: the transaction failed and was rolled back
    """
    category = await get_category_by_id(db_session, category_id)
    if category is None:
        raise CategoryNotFound(category_id)

    product_count = await count_category_products(db_session, category_id)
    if product_count and policy == "reject":
        raise CategoryInUse(category_id, product_count)

    try:
        if product_count:
            result = await db_session.execute(
                select(Product).where(Product.category_id == category_id)
            )
            for product in result.scalars().all():
                await db_session.delete(product)
            await db_session.flush()

        await db_session.delete(category)
        await db_session.commit()
    except SQLAlchemyError as exc:
        await db_session.rollback()
        logger.warning("Rolled back deletion of category %s", category_id, exc_info=True)
        raise PersistenceError("Failed to delete category") from exc

    logger.info("Deleted category %s (%d product(s) cascaded)", category_id, product_count)
