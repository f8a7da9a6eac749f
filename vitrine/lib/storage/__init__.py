"""Filesystem-backed store for uploaded catalog media."""

from vitrine.lib.storage.base import PLACEHOLDER_NAME, IncomingFile, UploadStore
from vitrine.lib.storage.local import LocalUploadStore, generate_filename

__all__ = ["IncomingFile", "LocalUploadStore", "PLACEHOLDER_NAME", "UploadStore", "generate_filename"]
