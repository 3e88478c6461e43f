"""
Storage factory for creating collection store instances.

This module provides factory functions to create the appropriate
storage implementation based on configuration.
"""

from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from core.logging import get_logger
from core.storage.base import BaseCollectionStore
from core.storage.cache import CollectionCache


if TYPE_CHECKING:
    from core.config import Settings


logger = get_logger(__name__)


class StorageBackend(str, Enum):
    """Supported storage backends."""
    JSON = "json"
    MEMORY = "memory"


def get_storage_backend(settings: "Settings") -> StorageBackend:
    """Determine which storage backend to use based on settings."""
    backend_str = settings.storage_backend.lower()

    try:
        return StorageBackend(backend_str)
    except ValueError:
        raise ValueError(
            f"Unsupported storage backend: {backend_str}. "
            f"Supported backends: {[b.value for b in StorageBackend]}"
        )


def create_collection_store(
    settings: "Settings",
    clock: Optional[Callable[[], float]] = None,
) -> BaseCollectionStore:
    """
    Create a collection store based on settings.

    Args:
        settings: Application settings
        clock: Optional cache clock override (monotonic seconds)

    Returns:
        Configured store with its own cache, ready for use
    """
    backend = get_storage_backend(settings)

    cache = CollectionCache(ttl_ms=settings.cache_ttl_ms, clock=clock)

    if backend == StorageBackend.JSON:
        from core.storage.json_file import JsonFileCollectionStore

        logger.info(
            "Creating JSON file store",
            data_dir=str(settings.data_dir),
            cache_ttl_ms=settings.cache_ttl_ms,
        )
        store = JsonFileCollectionStore(
            data_dir=settings.data_dir,
            cache=cache,
            indent=settings.json_indent,
        )

    else:
        from core.storage.memory import MemoryCollectionStore

        logger.info("Creating in-memory store", cache_ttl_ms=settings.cache_ttl_ms)
        store = MemoryCollectionStore(cache=cache, indent=settings.json_indent)

    store.setup()
    return store
