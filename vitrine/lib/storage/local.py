"""Local filesystem upload store."""

from __future__ import annotations

import asyncio
import logging
import random
import re
import time
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from vitrine.lib.storage.base import PLACEHOLDER_NAME

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-z0-9_-]", re.IGNORECASE)
MAX_BASENAME_LENGTH = 40
FALLBACK_BASENAME = "media"


def generate_filename(original_name: str) -> str:
    """Build ``<sanitizedBase>-<unixMs>-<randomInt><ext>`` from a client filename."""
    # Clients may send full paths; only the final component matters.
    name = PurePosixPath(original_name.replace("\\", "/")).name
    path = PurePosixPath(name)
    extension = path.suffix
    base = name[: -len(extension)] if extension else name

    sanitized = _UNSAFE_CHARS.sub("", base)[:MAX_BASENAME_LENGTH]
    sanitized = sanitized or FALLBACK_BASENAME

    timestamp = int(time.time() * 1000)
    suffix = random.randint(0, 1_000_000_000)
    return f"{sanitized}-{timestamp}-{suffix}{extension}"


class LocalUploadStore:
    """Flat directory of uploaded files served under ``url_prefix``."""

    def __init__(self, base_path: Path, url_prefix: str = "/uploads") -> None:
        self._base_path = base_path
        self.url_prefix = "/" + url_prefix.strip("/")

    @property
    def base_path(self) -> Path:
        return self._base_path

    async def store(self, original_name: str, data: bytes) -> str:
        filename = generate_filename(original_name)
        path = self._base_path / filename
        await asyncio.to_thread(self._write_file, path, data)
        logger.debug("Stored upload %s (%d bytes)", filename, len(data))
        return filename

    async def delete(self, filename: str) -> bool:
        if not self._is_safe_name(filename):
            logger.warning("Refusing to delete suspicious upload name %r", filename)
            return False
        path = self._base_path / filename
        try:
            await asyncio.to_thread(self._unlink, path)
        except OSError:
            logger.warning("Failed to remove upload %s", filename, exc_info=True)
            return False
        logger.info("Removed upload %s", filename)
        return True

    async def delete_many(self, filenames: Iterable[str]) -> None:
        await asyncio.gather(*(self.delete(name) for name in set(filenames)))

    async def list(self) -> list[str]:
        return await asyncio.to_thread(self._list_files, self._base_path)

    def url_for(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    def filename_from_src(self, src: str | None) -> str | None:
        prefix = self.url_prefix + "/"
        if not isinstance(src, str) or not src.startswith(prefix):
            return None
        # The store is flat: only a single segment under the prefix names a file.
        filename = src[len(prefix):]
        if not self._is_safe_name(filename) or filename == PLACEHOLDER_NAME:
            return None
        return filename

    # -- internal helpers --

    @staticmethod
    def _is_safe_name(filename: str) -> bool:
        return bool(filename) and "/" not in filename and "\\" not in filename and filename not in (".", "..")

    @staticmethod
    def _write_file(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    @staticmethod
    def _unlink(path: Path) -> None:
        path.unlink(missing_ok=True)

    @staticmethod
    def _list_files(base: Path) -> list[str]:
        if not base.exists():
            return []
        return sorted(
            p.name for p in base.iterdir() if p.is_file() and p.name != PLACEHOLDER_NAME
        )
