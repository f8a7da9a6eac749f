"""Shared pytest fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import vitrine.db.models  # noqa: F401 - register all models on Base
from vitrine.db.base import Base
from vitrine.db.services import category_service
from vitrine.lib.payload import resolve_category_payload
from vitrine.lib.storage import LocalUploadStore


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def temp_app_yaml(tmp_path):
    """Create a temporary app.yaml file for testing."""
    config_path = tmp_path / "app.yaml"

    def _create_config(config: dict):
        with open(config_path, "w") as f:
            yaml.safe_dump(config, f)
        return config_path

    return _create_config


# ---------------------------------------------------------------------------
# Database (a throwaway SQLite file per test)
# ---------------------------------------------------------------------------


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}"


@pytest.fixture
async def engine(db_url):
    engine = create_async_engine(db_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------


@pytest.fixture
def upload_store(tmp_path):
    directory = tmp_path / "uploads"
    directory.mkdir()
    return LocalUploadStore(directory, url_prefix="/uploads")


@pytest.fixture
def upload_names(upload_store):
    """Return a callable listing the files currently in the upload directory."""

    def _names() -> set[str]:
        return {path.name for path in upload_store.base_path.iterdir() if path.is_file()}

    return _names


# ---------------------------------------------------------------------------
# Catalog records
# ---------------------------------------------------------------------------


@pytest.fixture
async def category(db_session):
    return await category_service.create_category(
        db_session,
        resolve_category_payload({"slug": "lighting", "name": "Lighting"}),
    )


@pytest.fixture
def mock_db_session():
    """Create a mock async database session.

    The session's execute method returns a mock result that supports both
    scalar_one_or_none() and scalars().all() access patterns.
    """
    session = AsyncMock()

    mock_scalars = MagicMock()
    mock_scalars.all.return_value = []

    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = None
    mock_result.scalar.return_value = 0
    mock_result.scalars.return_value = mock_scalars

    session.execute = AsyncMock(return_value=mock_result)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.add = MagicMock()
    session.delete = AsyncMock()
    session.expunge_all = MagicMock()

    return session
