"""
Abstract base classes for collection storage backends.

This module defines the fixed set of collections, the descriptor each one
maps to, and the contract every backend implements. Backends only move
bytes; validation, caching and failure handling live here so every backend
degrades the same way.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from pydantic import TypeAdapter

from core.logging import get_logger
from core.storage.cache import CollectionCache
from core.storage.records import (
    Forum,
    Message,
    Post,
    Record,
    Resource,
    Session,
    Topic,
    User,
)


logger = get_logger(__name__)


CollectionData = Union[dict[str, Record], list[Record]]


class StoreError(Exception):
    """Base exception for store operations."""
    pass


class UnknownCollectionError(StoreError):
    """Collection name is not one of the fixed set."""
    pass


class Collection(str, Enum):
    """Collections known to the store."""
    USERS = "users"
    MESSAGES = "messages"
    SESSIONS = "sessions"
    RESOURCES = "resources"
    FORUMS = "forums"
    TOPICS = "topics"
    POSTS = "posts"


class KeyStyle(str, Enum):
    """How records are addressed inside a collection."""
    MAP = "map"    # JSON object keyed by record id
    LIST = "list"  # JSON array scanned by id


@dataclass(frozen=True)
class CollectionDescriptor:
    """
    Static description of one collection.

    Ties the collection to its backing file name, key style and record
    type, and knows how to (de)serialize the whole collection.
    """
    collection: Collection
    record_type: type[Record]
    key_style: KeyStyle = KeyStyle.LIST
    adapter: TypeAdapter = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.key_style == KeyStyle.MAP:
            adapter = TypeAdapter(dict[str, self.record_type])
        else:
            adapter = TypeAdapter(list[self.record_type])
        object.__setattr__(self, "adapter", adapter)

    @property
    def filename(self) -> str:
        return f"{self.collection.value}.json"

    @property
    def is_map(self) -> bool:
        return self.key_style == KeyStyle.MAP

    def default(self) -> CollectionData:
        """Fresh empty value for this collection."""
        return {} if self.is_map else []

    def decode(self, payload: bytes) -> CollectionData:
        return self.adapter.validate_json(payload)

    def encode(self, data: CollectionData, indent: Optional[int] = 2) -> bytes:
        return self.adapter.dump_json(data, by_alias=True, indent=indent)


DESCRIPTORS: dict[Collection, CollectionDescriptor] = {
    Collection.USERS: CollectionDescriptor(Collection.USERS, User, KeyStyle.MAP),
    Collection.MESSAGES: CollectionDescriptor(Collection.MESSAGES, Message),
    Collection.SESSIONS: CollectionDescriptor(Collection.SESSIONS, Session),
    Collection.RESOURCES: CollectionDescriptor(Collection.RESOURCES, Resource),
    Collection.FORUMS: CollectionDescriptor(Collection.FORUMS, Forum),
    Collection.TOPICS: CollectionDescriptor(Collection.TOPICS, Topic),
    Collection.POSTS: CollectionDescriptor(Collection.POSTS, Post),
}


def resolve_collection(name: Union[Collection, str]) -> Collection:
    """
    Normalize a collection name.

    Raises:
        UnknownCollectionError: If the name is not one of the fixed set
    """
    try:
        return Collection(name)
    except ValueError:
        raise UnknownCollectionError(
            f"Unknown collection: {name!r}. "
            f"Supported collections: {[c.value for c in Collection]}"
        ) from None


def describe(name: Union[Collection, str]) -> CollectionDescriptor:
    """Get the descriptor for a collection name."""
    return DESCRIPTORS[resolve_collection(name)]


class BaseCollectionStore(ABC):
    """
    Abstract base class for collection persistence.

    Subclasses provide raw reads and writes of a serialized collection.
    This class layers the read-through cache on top and turns backend
    failures into defaults (reads) or False (writes).
    """

    def __init__(
        self,
        cache: Optional[CollectionCache] = None,
        indent: Optional[int] = 2,
    ):
        """
        Args:
            cache: Cache instance owned by this store (fresh one if omitted)
            indent: JSON indentation used when serializing collections
        """
        self.cache = cache if cache is not None else CollectionCache()
        self._indent = indent
        # Collections whose backing data exists but could not be read.
        self._unreadable: set[Collection] = set()

    @abstractmethod
    def setup(self) -> None:
        """Prepare the backend. Must be idempotent."""
        pass

    @abstractmethod
    def _read(self, descriptor: CollectionDescriptor) -> Optional[bytes]:
        """Serialized collection, or None when no backing data exists yet."""
        pass

    @abstractmethod
    def _write(self, descriptor: CollectionDescriptor, payload: bytes) -> None:
        """Replace the serialized collection without exposing a partial write."""
        pass

    def location(self, descriptor: CollectionDescriptor) -> Any:
        """Human-readable location of a collection, for log context."""
        return descriptor.filename

    def load(self, name: Union[Collection, str]) -> CollectionData:
        """
        Load a collection, serving from cache while it is fresh.

        Read failures are logged and yield the empty default; they are
        not cached, so the next call retries the backend. Until a read
        succeeds, save() refuses to overwrite that collection.
        """
        descriptor = describe(name)
        cached = self.cache.get(descriptor.collection)
        if cached is not None:
            return cached

        try:
            payload = self._read(descriptor)
            if payload is None:
                data = descriptor.default()
            else:
                data = descriptor.decode(payload)
        except (OSError, ValueError) as exc:
            logger.error(
                "Failed to load collection",
                collection=descriptor.collection.value,
                location=str(self.location(descriptor)),
                error=str(exc),
            )
            self._unreadable.add(descriptor.collection)
            return descriptor.default()

        self._unreadable.discard(descriptor.collection)
        self.cache.put(descriptor.collection, data)
        return data

    def save(self, name: Union[Collection, str], data: CollectionData) -> bool:
        """
        Persist a whole collection and refresh its cache entry.

        Returns False on failure, leaving the cache as it was.
        """
        descriptor = describe(name)
        if descriptor.collection in self._unreadable:
            logger.error(
                "Refusing to overwrite unreadable collection",
                collection=descriptor.collection.value,
                location=str(self.location(descriptor)),
            )
            return False

        try:
            payload = descriptor.encode(data, indent=self._indent)
            self._write(descriptor, payload)
        except (OSError, ValueError) as exc:
            logger.error(
                "Failed to save collection",
                collection=descriptor.collection.value,
                location=str(self.location(descriptor)),
                error=str(exc),
            )
            return False

        self.cache.put(descriptor.collection, data)
        logger.debug(
            "Collection saved",
            collection=descriptor.collection.value,
            records=len(data),
        )
        return True

    def clear_cache(self) -> None:
        """Force the next read of every collection to hit the backend."""
        self.cache.clear()
