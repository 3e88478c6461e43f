"""
Storage abstraction layer.

Provides typed, cache-accelerated load/save of whole collections.

Supported backends:
- JSON files, one per collection (default)
- In-memory (tests, ephemeral use)
"""

from core.storage.base import (
    DESCRIPTORS,
    BaseCollectionStore,
    Collection,
    CollectionData,
    CollectionDescriptor,
    KeyStyle,
    StoreError,
    UnknownCollectionError,
    describe,
    resolve_collection,
)
from core.storage.cache import CollectionCache
from core.storage.factory import (
    create_collection_store,
    get_storage_backend,
    StorageBackend,
)
from core.storage.records import (
    Forum,
    ForumWithStats,
    Message,
    Post,
    Record,
    Resource,
    Session,
    Topic,
    TopicWithPosts,
    User,
    utcnow,
)

__all__ = [
    # Abstract interfaces
    "BaseCollectionStore",
    "CollectionCache",
    # Collections
    "Collection",
    "CollectionData",
    "CollectionDescriptor",
    "DESCRIPTORS",
    "KeyStyle",
    "describe",
    "resolve_collection",
    # Errors
    "StoreError",
    "UnknownCollectionError",
    # Records
    "Record",
    "User",
    "Message",
    "Session",
    "Resource",
    "Forum",
    "ForumWithStats",
    "Topic",
    "TopicWithPosts",
    "Post",
    "utcnow",
    # Factory functions
    "create_collection_store",
    "get_storage_backend",
    "StorageBackend",
]
