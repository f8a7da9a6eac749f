"""Public, read-only catalog API."""

from litestar import Controller, Request, get
from sqlalchemy.ext.asyncio import AsyncSession

from vitrine.db.services import category_service, product_service
from vitrine.lib.exceptions import CategoryNotFound, ProductNotFound
from vitrine.lib.serializers import build_base_url, serialize_category, serialize_product


def product_renderer(request: Request):
    """Return a serializer bound to the app's media URL settings."""
    settings = request.app.state.settings
    base_url = build_base_url(request) if settings.uploads.absolute_urls else ""
    prefix = request.app.state.upload_store.url_prefix
    return lambda product: serialize_product(product, base_url=base_url, upload_prefix=prefix)


class HealthController(Controller):
    path = "/api"

    @get("/health")
    async def health(self) -> dict:
        return {"status": "ok"}


class CatalogController(Controller):
    """Categories and products as shown on the public site."""

    path = "/api/catalog"

    @get("/categories")
    async def list_categories(self, db_session: AsyncSession) -> list[dict]:
        categories = await category_service.list_categories(db_session)
        return [serialize_category(category) for category in categories]

    @get("/categories/{slug:str}")
    async def get_category(self, db_session: AsyncSession, slug: str) -> dict:
        category = await category_service.get_category_by_slug(db_session, slug)
        if category is None:
            raise CategoryNotFound(slug)
        return serialize_category(category)

    @get("/products")
    async def list_products(
        self,
        request: Request,
        db_session: AsyncSession,
        category: str | None = None,
    ) -> list[dict]:
        """List products by name, optionally for one category slug."""
        products = await product_service.list_products(db_session, category_slug=category)
        render = product_renderer(request)
        return [render(product) for product in products]

    @get("/products/{slug:str}")
    async def get_product(self, request: Request, db_session: AsyncSession, slug: str) -> dict:
        product = await product_service.get_product_by_slug(db_session, slug)
        if product is None:
            raise ProductNotFound(slug)
        return product_renderer(request)(product)
