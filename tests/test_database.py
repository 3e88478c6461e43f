"""
Tests for the repository facade and database construction.
"""

import pytest

from core.config import Settings
from core.storage import Collection, Message, Session, User
from core.storage.json_file import JsonFileCollectionStore
from core.storage.memory import MemoryCollectionStore
from manager.database import Database, create_database, get_database


def test_users_find_by_email(db):
    ada = db.users.create({"email": "ada@example.com", "name": "Ada"})
    db.users.create({"email": "bob@example.com"})

    assert db.users.find_by_email("ada@example.com") == ada
    assert isinstance(db.users.find_by_email("ada@example.com"), User)
    assert db.users.find_by_email("nobody@example.com") is None


def test_message_lookups(db):
    sent = db.messages.create({"senderId": "u1", "receiverId": "u2", "content": "hi"})
    received = db.messages.create({"senderId": "u2", "receiverId": "u1", "content": "yo"})

    assert db.messages.find_by_sender_id("u1") == [sent]
    assert db.messages.find_by_receiver_id("u1") == [received]
    assert all(isinstance(m, Message) for m in db.messages.get_all())


def test_session_lookups(db):
    session = db.sessions.create({"expertId": "e1", "clientId": "c1", "status": "booked"})

    assert db.sessions.find_by_expert_id("e1") == [session]
    assert db.sessions.find_by_client_id("c1") == [session]
    assert isinstance(session, Session)


def test_resource_lookups(db):
    guide = db.resources.create({"title": "Guide", "category": "docs"})
    db.resources.create({"title": "Talk", "category": "video"})

    assert db.resources.find_by_category("docs") == [guide]


def test_topic_and_post_lookups(db):
    forum = db.forums.create({"name": "General"})
    topic = db.topics.create({"forumId": forum.id, "title": "T", "authorId": "u1"})
    reply = db.posts.create({"topicId": topic.id, "content": "r", "authorId": "u2"})

    assert [t.id for t in db.topics.find_by_forum_id(forum.id)] == [topic.id]
    assert [t.id for t in db.topics.find_by_author_id("u1")] == [topic.id]
    assert db.posts.find_by_author_id("u2") == [reply]

    posts = db.posts.find_by_topic_id(topic.id)
    assert [p.is_first_post for p in posts] == [True, False]


def test_plain_updates_on_cascading_collections(db):
    forum = db.forums.create({"name": "General"})
    topic = db.topics.create({"forumId": forum.id, "title": "Old"})

    renamed = db.topics.update(topic.id, {"title": "New"})

    assert renamed.title == "New"
    assert renamed.post_count == 1


def test_clear_cache_sees_external_writes(db, data_dir):
    db.forums.create({"name": "General"})
    JsonFileCollectionStore(data_dir).save(Collection.FORUMS, [])

    assert len(db.forums.get_all()) == 1
    db.clear_cache()
    assert db.forums.get_all() == []


def test_databases_are_isolated():
    first = Database(MemoryCollectionStore())
    second = Database(MemoryCollectionStore())

    first.forums.create({"name": "General"})

    assert second.forums.get_all() == []


def test_create_database_from_settings(tmp_path):
    db = create_database(Settings(storage_backend="json", data_dir=tmp_path, latest_posts_limit=2))
    forum = db.forums.create({"name": "General"})

    assert (tmp_path / "forums.json").exists()
    assert isinstance(db.store, JsonFileCollectionStore)
    assert db.integrity.latest_posts_limit == 2
    assert db.forums.get_by_id(forum.id) == forum


def test_latest_posts_limit_is_applied():
    db = create_database(Settings(storage_backend="memory", latest_posts_limit=2))
    forum = db.forums.create({"name": "General"})
    topic = db.topics.create({"forumId": forum.id, "title": "T"})
    for i in range(3):
        db.posts.create({"topicId": topic.id, "content": str(i)})

    assert len(db.forums.get_forum_with_stats(forum.id).latest_posts) == 2


@pytest.fixture
def fresh_singleton():
    get_database.cache_clear()
    yield
    get_database.cache_clear()


def test_get_database_is_a_singleton(fresh_singleton):
    assert get_database() is get_database()
    assert isinstance(get_database(), Database)
