"""Catalog admin API: category/product writes and upload cleanup."""

from typing import Any
from uuid import UUID

from litestar import Controller, Request, delete, post, put
from litestar.datastructures import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from vitrine.auth.guards import admin_guard
from vitrine.controllers.catalog import product_renderer
from vitrine.db.services import catalog_sync, category_service, product_service, upload_service
from vitrine.lib.payload import extract_raw_payload, resolve_category_payload
from vitrine.lib.serializers import serialize_category
from vitrine.lib.storage import IncomingFile

MEDIA_FILES_FIELD = "mediaFiles"


async def read_product_form(request: Request) -> tuple[Any, list[IncomingFile]]:
    """Split a multipart product request into its raw payload and files.

    JSON requests are accepted too; they simply carry no files.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        body = await request.json()
        if isinstance(body, dict) and not any(key in body for key in ("payload", "data")):
            return body, []
        return extract_raw_payload(body if isinstance(body, dict) else None), []

    form = await request.form()
    files: list[IncomingFile] = []
    for value in form.getall(MEDIA_FILES_FIELD, []):
        if isinstance(value, UploadFile):
            files.append(
                IncomingFile(
                    filename=value.filename or "media",
                    data=await value.read(),
                    content_type=value.content_type or "application/octet-stream",
                )
            )
    return extract_raw_payload(form), files


class CatalogAdminController(Controller):
    """Write side of the catalog, guarded by an admin token."""

    path = "/api/admin"
    guards = [admin_guard]

    # -- categories --

    @post("/catalog/categories")
    async def create_category(self, db_session: AsyncSession, data: dict[str, Any]) -> dict:
        payload = resolve_category_payload(data)
        category = await category_service.create_category(db_session, payload)
        return serialize_category(category)

    @put("/catalog/categories/{category_id:uuid}")
    async def update_category(
        self,
        db_session: AsyncSession,
        category_id: UUID,
        data: dict[str, Any],
    ) -> dict:
        payload = resolve_category_payload(data, partial=True)
        category = await category_service.update_category(db_session, category_id, payload)
        return serialize_category(category)

    @delete("/catalog/categories/{category_id:uuid}")
    async def delete_category(
        self,
        request: Request,
        db_session: AsyncSession,
        category_id: UUID,
    ) -> None:
        policy = request.app.state.settings.catalog.category_delete
        await category_service.delete_category(db_session, category_id, policy=policy)

    # -- products --

    @post("/catalog/products")
    async def create_product(self, request: Request, db_session: AsyncSession) -> dict:
        """Create a product from ``payload`` plus ``mediaFiles`` uploads."""
        settings = request.app.state.settings
        raw_payload, files = await read_product_form(request)
        product = await catalog_sync.create_product_with_uploads(
            db_session,
            request.app.state.upload_store,
            raw_payload,
            files,
            assets_enabled=settings.catalog.assets_enabled,
            max_upload_size=settings.uploads.max_upload_size,
        )
        return product_renderer(request)(product)

    @put("/catalog/products/{product_id:uuid}")
    async def update_product(
        self,
        request: Request,
        db_session: AsyncSession,
        product_id: UUID,
    ) -> dict:
        settings = request.app.state.settings
        raw_payload, files = await read_product_form(request)
        product = await catalog_sync.update_product_with_uploads(
            db_session,
            request.app.state.upload_store,
            product_id,
            raw_payload,
            files,
            assets_enabled=settings.catalog.assets_enabled,
            max_upload_size=settings.uploads.max_upload_size,
        )
        return product_renderer(request)(product)

    @delete("/catalog/products/{product_id:uuid}")
    async def delete_product(self, db_session: AsyncSession, product_id: UUID) -> None:
        await product_service.delete_product(db_session, product_id)

    # -- uploads --

    @post("/uploads/cleanup", status_code=200)
    async def cleanup_uploads(self, request: Request, db_session: AsyncSession) -> dict:
        """Delete uploaded files no product media references."""
        result = await upload_service.reconcile_uploads(db_session, request.app.state.upload_store)
        return result.to_dict()
