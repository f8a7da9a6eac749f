"""Bulk-load a catalog document (categories plus products) into the database."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from vitrine.db.services import catalog_sync, category_service, product_service
from vitrine.lib.exceptions import InvalidPayload
from vitrine.lib.payload import resolve_category_payload
from vitrine.lib.storage import UploadStore

logger = logging.getLogger(__name__)


@dataclass
class SeedSummary:
    categories_created: int = 0
    products_created: int = 0


def _entries(document: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    entries = document.get(key) or []
    if not isinstance(entries, list) or not all(isinstance(item, Mapping) for item in entries):
        raise InvalidPayload(f"Invalid seed document: {key} must be a list of objects")
    return entries


async def seed_catalog(
    db_session: AsyncSession,
    store: UploadStore,
    document: Mapping[str, Any],
    assets_enabled: bool = True,
) -> SeedSummary:
    """Create every category and product in ``document`` that does not exist yet.

    Products reference their category by slug under ``category``; media
    entries must carry a ``src`` since a seed file has no uploads.
    """
    summary = SeedSummary()

    for raw in _entries(document, "categories"):
        payload = resolve_category_payload(raw)
        if await category_service.get_category_by_slug(db_session, payload.slug) is not None:
            logger.debug("Category %s already exists, skipping", payload.slug)
            continue
        await category_service.create_category(db_session, payload)
        summary.categories_created += 1

    for raw in _entries(document, "products"):
        slug = raw.get("slug")
        if slug and await product_service.get_product_by_slug(db_session, slug) is not None:
            logger.debug("Product %s already exists, skipping", slug)
            continue

        data = dict(raw)
        category_slug = data.pop("category", None)
        if category_slug is not None:
            category = await category_service.get_category_by_slug(db_session, category_slug)
            if category is None:
                raise InvalidPayload(f"Invalid seed document: unknown category {category_slug!r}")
            data["categoryId"] = str(category.id)

        await catalog_sync.create_product_with_uploads(
            db_session, store, data, assets_enabled=assets_enabled
        )
        summary.products_created += 1

    logger.info(
        "Seeded %d category(ies) and %d product(s)",
        summary.categories_created,
        summary.products_created,
    )
    return summary
