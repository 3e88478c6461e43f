"""
In-memory storage backend implementation.

Keeps each collection as serialized bytes so that every load and save
goes through the same encode/decode path as the file backend. Nothing
survives the process; used by tests and throwaway tooling.
"""

from typing import Optional

from core.storage.base import BaseCollectionStore, Collection, CollectionDescriptor
from core.storage.cache import CollectionCache


class MemoryCollectionStore(BaseCollectionStore):
    """Process-local store holding one serialized payload per collection."""

    def __init__(
        self,
        cache: Optional[CollectionCache] = None,
        indent: Optional[int] = 2,
    ):
        super().__init__(cache=cache, indent=indent)
        self._payloads: dict[Collection, bytes] = {}

    def setup(self) -> None:
        pass

    def location(self, descriptor: CollectionDescriptor) -> str:
        return f"memory://{descriptor.collection.value}"

    def _read(self, descriptor: CollectionDescriptor) -> Optional[bytes]:
        return self._payloads.get(descriptor.collection)

    def _write(self, descriptor: CollectionDescriptor, payload: bytes) -> None:
        self._payloads[descriptor.collection] = payload

    def raw(self, collection: Collection) -> Optional[bytes]:
        """Serialized payload as last written, bypassing the cache."""
        return self._payloads.get(collection)

    def inject(self, collection: Collection, payload: bytes) -> None:
        """Replace a payload out-of-band, as another process would."""
        self._payloads[collection] = payload
