"""
Referential integrity across forums, topics and posts.

The CRUD engine knows nothing about relationships; this layer keeps the
denormalized aggregates consistent whenever topics and posts come and go:

- Forum.topicCount / Forum.postCount are always full recounts.
- Topic.postCount / Topic.lastPostAt follow every post create and remove.
- Creating a topic synthesizes its first post.
- Removing a topic removes its posts first, then the topic, then recounts.

Any failed step aborts the cascade and is reported as None/False. Steps
that already persisted are not rolled back.
"""

from typing import Any, Mapping, Optional

from core.config import settings
from core.logging import get_logger
from core.storage import (
    Collection,
    Forum,
    ForumWithStats,
    Post,
    Topic,
    TopicWithPosts,
)
from core.storage.records import default_reactions
from manager.crud import CrudEngine


logger = get_logger(__name__)


class IntegrityManager:
    """Cascading writes and composite reads for the forum collections."""

    def __init__(self, engine: CrudEngine, latest_posts_limit: Optional[int] = None):
        self.engine = engine
        self.latest_posts_limit = (
            latest_posts_limit if latest_posts_limit is not None
            else settings.latest_posts_limit
        )

    # =========================================
    # Topics
    # =========================================

    def create_topic(self, topic: Mapping[str, Any]) -> Optional[Topic]:
        """
        Create a topic together with its first post.

        The first post carries the topic's content and author. The topic
        is stamped with postCount=1 and lastPostAt of that post, and the
        owning forum is recounted.
        """
        created = self.engine.create(Collection.TOPICS, topic)
        if created is None:
            return self._abort(None, "create_topic", "create topic")

        first_post = self.engine.create(
            Collection.POSTS,
            {
                "topicId": created.id,
                "forumId": created.forum_id,
                "content": created.content,
                "authorId": created.author_id,
                "isFirstPost": True,
                "status": "active",
                "reactions": default_reactions(),
                "attachments": [],
            },
        )
        if first_post is None:
            return self._abort(None, "create_topic", "create first post", topic_id=created.id)

        stamped = self.engine.update(
            Collection.TOPICS,
            created.id,
            {"postCount": 1, "lastPostAt": first_post.created_at},
        )
        if stamped is None:
            return self._abort(None, "create_topic", "stamp topic", topic_id=created.id)

        if not self._refresh_forum(created.forum_id):
            return self._abort(None, "create_topic", "recount forum", topic_id=created.id)

        logger.info(
            "Topic created",
            topic_id=stamped.id,
            forum_id=stamped.forum_id,
            first_post_id=first_post.id,
        )
        return stamped

    def remove_topic(self, topic_id: str) -> bool:
        """Remove a topic's posts, then the topic, then recount its forum."""
        topic = self.engine.get_by_id(Collection.TOPICS, topic_id)
        if topic is None:
            return False

        # Children first: a topic removed before its posts would leave
        # orphans with nothing left to trigger a recount.
        posts = self.engine.find_by(Collection.POSTS, "topicId", topic_id)
        for post in posts:
            if not self.engine.remove(Collection.POSTS, post.id):
                return self._abort(
                    False, "remove_topic", "remove post", topic_id=topic_id, post_id=post.id,
                )

        if not self.engine.remove(Collection.TOPICS, topic_id):
            return self._abort(False, "remove_topic", "remove topic", topic_id=topic_id)

        if not self._refresh_forum(topic.forum_id):
            return self._abort(False, "remove_topic", "recount forum", topic_id=topic_id)

        logger.info("Topic removed", topic_id=topic_id, posts_removed=len(posts))
        return True

    def increment_views(self, topic_id: str) -> Optional[Topic]:
        topic = self.engine.get_by_id(Collection.TOPICS, topic_id)
        if topic is None:
            return None
        return self.engine.update(
            Collection.TOPICS, topic_id, {"views": (topic.get("views") or 0) + 1},
        )

    def get_topic_with_posts(self, topic_id: str) -> Optional[TopicWithPosts]:
        """Topic plus all its posts, oldest first."""
        topic = self.engine.get_by_id(Collection.TOPICS, topic_id)
        if topic is None:
            return None

        posts = sorted(
            self.engine.find_by(Collection.POSTS, "topicId", topic_id),
            key=lambda post: post.created_at,
        )
        return TopicWithPosts.model_validate({**topic.to_document(), "posts": posts})

    # =========================================
    # Posts
    # =========================================

    def create_post(self, post: Mapping[str, Any]) -> Optional[Post]:
        """
        Create a post and update its topic and forum.

        A post without a forumId inherits the one of its topic.
        """
        values = Post.to_aliases(dict(post))
        topic = self.engine.get_by_id(Collection.TOPICS, values.get("topicId", ""))
        if topic is not None and not values.get("forumId"):
            values["forumId"] = topic.forum_id

        created = self.engine.create(Collection.POSTS, values)
        if created is None:
            return self._abort(None, "create_post", "create post")

        if topic is not None:
            touched = self.engine.update(
                Collection.TOPICS,
                topic.id,
                {
                    "lastPostAt": created.created_at,
                    "postCount": (topic.get("postCount") or 0) + 1,
                },
            )
            if touched is None:
                return self._abort(None, "create_post", "update topic", post_id=created.id)

        if created.forum_id and not self._refresh_forum(created.forum_id):
            return self._abort(None, "create_post", "recount forum", post_id=created.id)

        return created

    def remove_post(self, post_id: str) -> bool:
        """
        Remove a post and update its topic and forum.

        The topic's lastPostAt falls back to the newest remaining post,
        or to the topic's own createdAt when none remain.
        """
        post = self.engine.get_by_id(Collection.POSTS, post_id)
        if post is None:
            return False

        if not self.engine.remove(Collection.POSTS, post_id):
            return self._abort(False, "remove_post", "remove post", post_id=post_id)

        topic = self.engine.get_by_id(Collection.TOPICS, post.topic_id)
        if topic is not None:
            remaining = self.engine.find_by(Collection.POSTS, "topicId", topic.id)
            if remaining:
                last_post_at = max(p.created_at for p in remaining)
            else:
                last_post_at = topic.created_at

            touched = self.engine.update(
                Collection.TOPICS,
                topic.id,
                {
                    "lastPostAt": last_post_at,
                    "postCount": max(0, (topic.get("postCount") or 0) - 1),
                },
            )
            if touched is None:
                return self._abort(False, "remove_post", "update topic", post_id=post_id)

        if post.forum_id and not self._refresh_forum(post.forum_id):
            return self._abort(False, "remove_post", "recount forum", post_id=post_id)

        return True

    def add_reaction(self, post_id: str, user_id: str, reaction_type: str) -> Optional[Post]:
        """Add ``user_id`` to a reaction bucket. Idempotent."""
        post = self.engine.get_by_id(Collection.POSTS, post_id)
        if post is None:
            return None

        reactions = {kind: list(users) for kind, users in (post.reactions or {}).items()}
        bucket = reactions.setdefault(reaction_type, [])
        if user_id in bucket:
            return post

        bucket.append(user_id)
        return self.engine.update(Collection.POSTS, post_id, {"reactions": reactions})

    def remove_reaction(self, post_id: str, user_id: str, reaction_type: str) -> Optional[Post]:
        """Remove ``user_id`` from a reaction bucket. No-op if absent."""
        post = self.engine.get_by_id(Collection.POSTS, post_id)
        if post is None:
            return None

        users = (post.reactions or {}).get(reaction_type)
        if not users or user_id not in users:
            return post

        reactions = {kind: list(members) for kind, members in post.reactions.items()}
        reactions[reaction_type] = [uid for uid in users if uid != user_id]
        return self.engine.update(Collection.POSTS, post_id, {"reactions": reactions})

    # =========================================
    # Forums
    # =========================================

    def recompute_forum_counts(self, forum_id: str) -> Optional[Forum]:
        """Set the forum's topicCount/postCount from a full recount."""
        forum = self.engine.get_by_id(Collection.FORUMS, forum_id)
        if forum is None:
            return None

        topics = self.engine.find_by(Collection.TOPICS, "forumId", forum_id)
        posts = self.engine.find_by(Collection.POSTS, "forumId", forum_id)
        return self.engine.update(
            Collection.FORUMS,
            forum_id,
            {"topicCount": len(topics), "postCount": len(posts)},
        )

    def get_forum_with_stats(self, forum_id: str) -> Optional[ForumWithStats]:
        """Forum with live counts and its latest posts, newest first."""
        forum = self.engine.get_by_id(Collection.FORUMS, forum_id)
        if forum is None:
            return None

        topics = self.engine.find_by(Collection.TOPICS, "forumId", forum_id)
        posts = self.engine.find_by(Collection.POSTS, "forumId", forum_id)
        latest = sorted(posts, key=lambda post: post.created_at, reverse=True)

        return ForumWithStats.model_validate({
            **forum.to_document(),
            "topicCount": len(topics),
            "postCount": len(posts),
            "latestPosts": latest[:self.latest_posts_limit],
        })

    # =========================================
    # Internals
    # =========================================

    def _refresh_forum(self, forum_id: Optional[str]) -> bool:
        """
        Recount a forum if it exists.

        A missing forum has no aggregates to maintain and counts as
        success; only a failed write returns False.
        """
        if not forum_id or self.engine.get_by_id(Collection.FORUMS, forum_id) is None:
            return True
        return self.recompute_forum_counts(forum_id) is not None

    def _abort(self, result: Any, operation: str, step: str, **context: Any) -> Any:
        """Log a failed cascade step and hand back the failure result."""
        logger.error("Cascade aborted", operation=operation, step=step, **context)
        return result
