"""
Storage abstraction layer for file content.

This package keeps file bytes separate from file metadata so that the
content backend can change without touching the file service.
"""

from app.storage.base import StorageBackend
from app.storage.local import LocalStorageBackend
from app.storage.exceptions import (
    FileNotFoundError,
    StorageError,
)

__all__ = [
    "StorageBackend",
    "LocalStorageBackend",
    "StorageError",
    "FileNotFoundError",
]
