"""
Per-collection repositories.

Each repository binds the generic CRUD engine to one collection and adds
the lookups callers actually use. Topic and post writes are routed
through the integrity manager so their cascades always run.
"""

from datetime import datetime
from typing import Any, Mapping, Optional

from core.storage import (
    Collection,
    CollectionData,
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
)
from manager import queries
from manager.crud import CrudEngine
from manager.integrity import IntegrityManager


class CollectionRepository:
    """Generic CRUD bound to a single collection."""

    collection: Collection

    def __init__(self, engine: CrudEngine):
        self.engine = engine

    def get_all(self) -> CollectionData:
        return self.engine.get_all(self.collection)

    def get_by_id(self, record_id: str) -> Optional[Record]:
        return self.engine.get_by_id(self.collection, record_id)

    def find_by(self, field: str, value: Any) -> list[Record]:
        return self.engine.find_by(self.collection, field, value)

    def create(self, item: Mapping[str, Any]) -> Optional[Record]:
        return self.engine.create(self.collection, item)

    def update(self, record_id: str, updates: Mapping[str, Any]) -> Optional[Record]:
        return self.engine.update(self.collection, record_id, updates)

    def remove(self, record_id: str) -> bool:
        return self.engine.remove(self.collection, record_id)


class UserRepository(CollectionRepository):
    collection = Collection.USERS

    def find_by_email(self, email: str) -> Optional[User]:
        matches = self.find_by("email", email)
        return matches[0] if matches else None


class MessageRepository(CollectionRepository):
    collection = Collection.MESSAGES

    def find_by_sender_id(self, sender_id: str) -> list[Message]:
        return self.find_by("senderId", sender_id)

    def find_by_receiver_id(self, receiver_id: str) -> list[Message]:
        return self.find_by("receiverId", receiver_id)

    def get_conversation(self, user_a: str, user_b: str) -> list[Message]:
        return queries.get_conversation(self.engine, user_a, user_b)


class SessionRepository(CollectionRepository):
    collection = Collection.SESSIONS

    def find_by_expert_id(self, expert_id: str) -> list[Session]:
        return self.find_by("expertId", expert_id)

    def find_by_client_id(self, client_id: str) -> list[Session]:
        return self.find_by("clientId", client_id)

    def get_upcoming(self, now: Optional[datetime] = None) -> list[Session]:
        return queries.get_upcoming_sessions(self.engine, now=now)


class ResourceRepository(CollectionRepository):
    collection = Collection.RESOURCES

    def find_by_category(self, category: str) -> list[Resource]:
        return self.find_by("category", category)

    def find_featured(self) -> list[Resource]:
        return queries.find_featured_resources(self.engine)


class ForumRepository(CollectionRepository):
    collection = Collection.FORUMS

    def __init__(self, engine: CrudEngine, integrity: IntegrityManager):
        super().__init__(engine)
        self.integrity = integrity

    def update_counts(self, forum_id: str) -> Optional[Forum]:
        return self.integrity.recompute_forum_counts(forum_id)

    def get_forum_with_stats(self, forum_id: str) -> Optional[ForumWithStats]:
        return self.integrity.get_forum_with_stats(forum_id)


class TopicRepository(CollectionRepository):
    collection = Collection.TOPICS

    def __init__(self, engine: CrudEngine, integrity: IntegrityManager):
        super().__init__(engine)
        self.integrity = integrity

    def create(self, item: Mapping[str, Any]) -> Optional[Topic]:
        """Create a topic and its first post; recounts the forum."""
        return self.integrity.create_topic(item)

    def remove(self, record_id: str) -> bool:
        """Remove a topic and all of its posts; recounts the forum."""
        return self.integrity.remove_topic(record_id)

    def find_by_forum_id(self, forum_id: str) -> list[Topic]:
        return self.find_by("forumId", forum_id)

    def find_by_author_id(self, author_id: str) -> list[Topic]:
        return self.find_by("authorId", author_id)

    def increment_views(self, topic_id: str) -> Optional[Topic]:
        return self.integrity.increment_views(topic_id)

    def get_topic_with_posts(self, topic_id: str) -> Optional[TopicWithPosts]:
        return self.integrity.get_topic_with_posts(topic_id)

    def search(self, query: str) -> list[Topic]:
        return queries.search_topics(self.engine, query)


class PostRepository(CollectionRepository):
    collection = Collection.POSTS

    def __init__(self, engine: CrudEngine, integrity: IntegrityManager):
        super().__init__(engine)
        self.integrity = integrity

    def create(self, item: Mapping[str, Any]) -> Optional[Post]:
        """Create a post; updates its topic and recounts the forum."""
        return self.integrity.create_post(item)

    def remove(self, record_id: str) -> bool:
        """Remove a post; updates its topic and recounts the forum."""
        return self.integrity.remove_post(record_id)

    def find_by_topic_id(self, topic_id: str) -> list[Post]:
        posts = self.find_by("topicId", topic_id)
        return sorted(posts, key=lambda post: post.created_at)

    def find_by_author_id(self, author_id: str) -> list[Post]:
        return self.find_by("authorId", author_id)

    def add_reaction(self, post_id: str, user_id: str, reaction_type: str) -> Optional[Post]:
        return self.integrity.add_reaction(post_id, user_id, reaction_type)

    def remove_reaction(self, post_id: str, user_id: str, reaction_type: str) -> Optional[Post]:
        return self.integrity.remove_reaction(post_id, user_id, reaction_type)
