"""Upload store protocol and common types."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# Reserved entry kept in the upload directory so it exists in version control.
PLACEHOLDER_NAME = ".gitkeep"


@dataclass
class IncomingFile:
    """A file received with a request, before it is written to the store."""

    filename: str
    data: bytes
    content_type: str = "application/octet-stream"


@runtime_checkable
class UploadStore(Protocol):
    """Interface for the store holding user-uploaded media."""

    url_prefix: str

    async def store(self, original_name: str, data: bytes) -> str:
        """Persist bytes under a generated filename and return that filename."""
        ...

    async def delete(self, filename: str) -> bool:
        """Remove a file; False if it could not be removed. Never raises."""
        ...

    async def delete_many(self, filenames: Iterable[str]) -> None:
        """Remove several files concurrently."""
        ...

    async def list(self) -> list[str]:
        """Return the filenames currently held by the store."""
        ...

    def url_for(self, filename: str) -> str:
        """Return the public, storage-relative path for a filename."""
        ...

    def filename_from_src(self, src: str | None) -> str | None:
        """Return the stored filename a media ``src`` points to, if any."""
        ...
