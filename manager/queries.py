"""
Read-only composite queries built on the CRUD engine.
"""

from datetime import datetime, timezone
from typing import Optional

from core.storage import Collection, Message, Resource, Session, Topic, utcnow
from manager.crud import CrudEngine


def get_conversation(engine: CrudEngine, user_a: str, user_b: str) -> list[Message]:
    """
    Messages exchanged between two users in either direction, oldest first.

    Symmetric: swapping the arguments yields the same list.
    """
    participants = {(user_a, user_b), (user_b, user_a)}
    messages = [
        message for message in engine.get_all(Collection.MESSAGES)
        if (message.sender_id, message.receiver_id) in participants
    ]
    return sorted(messages, key=lambda message: (message.sent_at, message.id))


def get_upcoming_sessions(
    engine: CrudEngine,
    now: Optional[datetime] = None,
) -> list[Session]:
    """Sessions starting strictly after ``now``, soonest first."""
    now = now or utcnow()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    upcoming = [
        session for session in engine.get_all(Collection.SESSIONS)
        if session.start_time is not None and session.start_time > now
    ]
    return sorted(upcoming, key=lambda session: session.start_time)


def find_featured_resources(engine: CrudEngine) -> list[Resource]:
    return [
        resource for resource in engine.get_all(Collection.RESOURCES)
        if resource.featured
    ]


def search_topics(engine: CrudEngine, query: str) -> list[Topic]:
    """Case-insensitive substring match on title, content and tags."""
    needle = query.lower()
    return [
        topic for topic in engine.get_all(Collection.TOPICS)
        if needle in (topic.title or "").lower()
        or needle in (topic.content or "").lower()
        or any(needle in tag.lower() for tag in topic.tags or [])
    ]
