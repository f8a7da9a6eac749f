"""Product writes that carry uploaded files.

Uploaded files reach the store before the payload is validated, so every
path out of these functions either commits a product referencing them or
removes them again. Once a commit has succeeded, cleanup of replaced media
is advisory: failures are logged and the database stays the source of
truth.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vitrine.db.models import Product
from vitrine.db.services import product_service, upload_service
from vitrine.lib.exceptions import ProductNotFound
from vitrine.lib.payload import RawPayload, ResolvedMedia, resolve_media, resolve_payload
from vitrine.lib.storage import IncomingFile, UploadStore

logger = logging.getLogger(__name__)


async def _discard_unreferenced(
    store: UploadStore,
    stored: Sequence[str],
    media: Sequence[ResolvedMedia],
) -> None:
    """Remove uploads of a committed request that no media entry points to."""
    used = {item.filename for item in media if item.filename}
    unused = [name for name in stored if name not in used]
    if unused:
        await upload_service.discard_uploads(store, unused)


async def create_product_with_uploads(
    db_session: AsyncSession,
    store: UploadStore,
    raw_payload: RawPayload | None,
    files: Sequence[IncomingFile] = (),
    assets_enabled: bool = True,
    max_upload_size: int | None = None,
) -> Product:
    """Store the request files, resolve the payload and create the product."""
    stored = await upload_service.store_incoming(store, files, max_upload_size)
    try:
        payload = resolve_payload(raw_payload, assets_enabled=assets_enabled)
        media = resolve_media(payload.media, stored, url_prefix=store.url_prefix)
        product = await product_service.create_product(db_session, payload, media)
    except BaseException:
        await upload_service.discard_uploads(store, stored)
        raise

    await _discard_unreferenced(store, stored, media)
    return product


async def update_product_with_uploads(
    db_session: AsyncSession,
    store: UploadStore,
    product_id: UUID,
    raw_payload: RawPayload | None,
    files: Sequence[IncomingFile] = (),
    assets_enabled: bool = True,
    max_upload_size: int | None = None,
) -> Product:
    """Update a product from a request, then delete the media it no longer uses."""
    if await product_service.get_product_by_id(db_session, product_id) is None:
        raise ProductNotFound(product_id)

    stored = await upload_service.store_incoming(store, files, max_upload_size)
    try:
        payload = resolve_payload(raw_payload, assets_enabled=assets_enabled)
        media = (
            resolve_media(payload.media, stored, url_prefix=store.url_prefix)
            if payload.provided("media")
            else None
        )
        result = await product_service.update_product(db_session, product_id, payload, media)
    except BaseException:
        await upload_service.discard_uploads(store, stored)
        raise

    await _discard_unreferenced(store, stored, media or [])

    if result.removed_media:
        try:
            orphaned = await product_service.unreferenced_sources(db_session, result.removed_media)
            removed = await upload_service.delete_uploads_for_sources(store, orphaned)
        except Exception:
            logger.warning("Cleanup of replaced media failed for product %s", product_id, exc_info=True)
        else:
            if removed:
                logger.info("Deleted %d replaced upload(s) for product %s", len(removed), product_id)

    return result.product
