"""
Database facade.

Wires one store, one CRUD engine and one integrity manager into a
single object exposing a repository per collection:

    db = create_database()
    forum = db.forums.create({"name": "General"})
    topic = db.topics.create({"forumId": forum.id, "title": "Hi", "content": "Hello"})
    db.forums.get_forum_with_stats(forum.id)
"""

from functools import lru_cache
from typing import Optional

from core.config import Settings, get_settings
from core.logging import get_logger
from core.storage import BaseCollectionStore, create_collection_store
from manager.crud import CrudEngine
from manager.integrity import IntegrityManager
from manager.repositories import (
    ForumRepository,
    MessageRepository,
    PostRepository,
    ResourceRepository,
    SessionRepository,
    TopicRepository,
    UserRepository,
)


logger = get_logger(__name__)


class Database:
    """
    Entry point for collaborators consuming the store.

    The store (and the cache it owns) is injected, so tests can build an
    isolated instance per case.
    """

    def __init__(
        self,
        store: BaseCollectionStore,
        latest_posts_limit: Optional[int] = None,
    ):
        self.store = store
        self.engine = CrudEngine(store)
        self.integrity = IntegrityManager(self.engine, latest_posts_limit=latest_posts_limit)

        self.users = UserRepository(self.engine)
        self.messages = MessageRepository(self.engine)
        self.sessions = SessionRepository(self.engine)
        self.resources = ResourceRepository(self.engine)
        self.forums = ForumRepository(self.engine, self.integrity)
        self.topics = TopicRepository(self.engine, self.integrity)
        self.posts = PostRepository(self.engine, self.integrity)

    def clear_cache(self) -> None:
        """Assume the backing data changed externally; reload on next read."""
        self.engine.clear_cache()
        logger.debug("Cache cleared")


def create_database(settings: Optional[Settings] = None) -> Database:
    """Build a database from settings (defaults to the environment)."""
    settings = settings or get_settings()
    store = create_collection_store(settings)
    return Database(store, latest_posts_limit=settings.latest_posts_limit)


@lru_cache
def get_database() -> Database:
    """Process-wide database singleton."""
    return create_database()
