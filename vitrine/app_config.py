"""Application configuration helpers for Vitrine.

Database, upload store and static file setup live here so ``create_app``
only wires the pieces together.
"""

from pathlib import Path

from advanced_alchemy.config import EngineConfig
from advanced_alchemy.extensions.litestar import AsyncSessionConfig, SQLAlchemyAsyncConfig
from litestar.static_files import create_static_files_router

from vitrine.config import Settings
from vitrine.db.base import Base
from vitrine.lib.storage import LocalUploadStore


def build_db_config(settings: Settings) -> SQLAlchemyAsyncConfig:
    """Build the SQLAlchemy async configuration from settings."""
    if "sqlite" in settings.db.url:
        engine_config = EngineConfig(echo=settings.db.echo)
    else:
        engine_config = EngineConfig(
            pool_size=settings.db.pool_size,
            max_overflow=settings.db.pool_overflow,
            pool_timeout=settings.db.pool_timeout,
            pool_pre_ping=settings.db.pool_pre_ping,
            echo=settings.db.echo,
        )

    return SQLAlchemyAsyncConfig(
        connection_string=settings.db.url,
        metadata=Base.metadata,
        create_all=settings.db.create_all,
        session_config=AsyncSessionConfig(expire_on_commit=False),
        engine_config=engine_config,
    )


def build_upload_store(settings: Settings) -> LocalUploadStore:
    """Create the upload store, making sure its directory exists."""
    directory = Path(settings.uploads.directory)
    directory.mkdir(parents=True, exist_ok=True)
    return LocalUploadStore(directory, url_prefix=settings.uploads.url_prefix)


def build_uploads_router(store: LocalUploadStore):
    """Serve stored uploads at the store's URL prefix."""
    return create_static_files_router(
        path=store.url_prefix,
        directories=[store.base_path],
        include_in_schema=False,
    )
