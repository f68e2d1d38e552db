"""
Storage backend selection.

STORAGE_BACKEND picks the implementation; "local" is the only one
shipped. Tests replace get_storage through app.dependency_overrides.
"""
from functools import lru_cache

from app.config import settings
from app.logging_config import setup_logging
from app.storage.base import StorageBackend
from app.storage.local import LocalStorageBackend

logger = setup_logging()

STORAGE_BACKENDS = {
    "local": LocalStorageBackend,
}


@lru_cache
def _build_backend(backend: str, base_path: str) -> StorageBackend:
    try:
        backend_class = STORAGE_BACKENDS[backend]
    except KeyError:
        raise ValueError(
            f"Unknown storage backend: {backend} "
            f"(supported: {', '.join(STORAGE_BACKENDS)})"
        )
    logger.info(f"Using {backend} storage at {base_path}")
    return backend_class(base_path=base_path)


def get_storage() -> StorageBackend:
    """
    Return the configured storage backend.

    One backend instance is shared per (backend, base path) pair.

    Raises:
        ValueError: If STORAGE_BACKEND is not supported
    """
    return _build_backend(settings.STORAGE_BACKEND, settings.STORAGE_BASE_PATH)
