"""ASGI application factory for Vitrine."""

import logging

from advanced_alchemy.extensions.litestar import SQLAlchemyPlugin
from litestar import Litestar

from vitrine.app_config import build_db_config, build_upload_store, build_uploads_router
from vitrine.config import Settings, get_settings
from vitrine.controllers import CatalogAdminController, CatalogController, HealthController
from vitrine.lib.exceptions import EXCEPTION_HANDLERS

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> Litestar:
    """Create and configure the Litestar application."""
    if settings is None:
        settings = get_settings()

    logging.getLogger("vitrine").setLevel(settings.logging.level)

    db_config = build_db_config(settings)
    upload_store = build_upload_store(settings)

    if not settings.auth.enabled:
        logger.warning("Admin authentication is disabled; catalog writes are open")

    app = Litestar(
        route_handlers=[
            HealthController,
            CatalogController,
            CatalogAdminController,
            build_uploads_router(upload_store),
        ],
        plugins=[SQLAlchemyPlugin(config=db_config)],
        exception_handlers=EXCEPTION_HANDLERS,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.upload_store = upload_store
    app.state.auth_enabled = settings.auth.enabled
    app.state.secret_key = settings.secret_key

    return app


def __getattr__(name: str):
    # ``vitrine.asgi:app`` is built on first access so importing the factory
    # does not require a configured environment.
    if name == "app":
        app = create_app()
        globals()["app"] = app
        return app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
