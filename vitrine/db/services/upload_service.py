"""Upload bookkeeping: storing request files, cleanup and orphan reconciliation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from vitrine.db.services import product_service
from vitrine.lib.exceptions import UploadTooLarge
from vitrine.lib.storage import IncomingFile, UploadStore

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    removed: list[str] = field(default_factory=list)

    @property
    def total_removed(self) -> int:
        return len(self.removed)

    def to_dict(self) -> dict:
        return {"removed": self.removed, "totalRemoved": self.total_removed}


def check_upload_sizes(files: Sequence[IncomingFile], max_upload_size: int | None) -> None:
    """Reject the whole request if any file exceeds the size limit."""
    if not max_upload_size:
        return
    for incoming in files:
        if len(incoming.data) > max_upload_size:
            raise UploadTooLarge(incoming.filename, len(incoming.data), max_upload_size)


async def store_incoming(
    store: UploadStore,
    files: Sequence[IncomingFile],
    max_upload_size: int | None = None,
) -> list[str]:
    """Write every request file to the store, in order.

    If any write fails, the files already written for this request are
    removed before the error propagates.
    """
    check_upload_sizes(files, max_upload_size)

    stored: list[str] = []
    try:
        for incoming in files:
            stored.append(await store.store(incoming.filename, incoming.data))
    except BaseException:
        await discard_uploads(store, stored)
        raise
    return stored


async def discard_uploads(store: UploadStore, filenames: Iterable[str]) -> None:
    """Remove files written for a request that did not commit."""
    filenames = list(filenames)
    if not filenames:
        return
    logger.info("Discarding %d upload(s) from a failed request", len(filenames))
    await store.delete_many(filenames)


async def delete_uploads_for_sources(store: UploadStore, sources: Iterable[str]) -> list[str]:
    """Delete the stored files behind media sources; other sources are ignored.

    Runs after a commit, so failures are logged by the store and never raised.
    """
    filenames = [name for name in (store.filename_from_src(src) for src in sources) if name]
    if filenames:
        await store.delete_many(filenames)
    return filenames


async def reconcile_uploads(db_session: AsyncSession, store: UploadStore) -> ReconcileResult:
    """Delete every stored file that no media row references.

    A file written by a request whose transaction has not yet committed looks
    unreferenced here; a sweep landing in that window removes it.
    """
    on_disk = await store.list()
    sources = await product_service.list_media_sources(db_session)
    referenced = {name for name in map(store.filename_from_src, sources) if name}

    result = ReconcileResult()
    for name in on_disk:
        if name in referenced:
            continue
        if await store.delete(name):
            result.removed.append(name)
    logger.info(
        "Upload sweep: %d file(s) on disk, %d referenced, %d removed",
        len(on_disk),
        len(referenced),
        result.total_removed,
    )
    return result
