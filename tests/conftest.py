"""
Pytest configuration and fixtures.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("STORAGE_BACKEND", "memory")

from core.config import Settings
from core.storage import CollectionCache, create_collection_store
from core.storage.json_file import JsonFileCollectionStore
from manager.database import Database


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def json_settings(data_dir):
    return Settings(storage_backend="json", data_dir=data_dir)


@pytest.fixture
def json_store(data_dir, clock):
    """File-backed store with a hand-driven cache clock."""
    store = JsonFileCollectionStore(data_dir, cache=CollectionCache(ttl_ms=5000, clock=clock))
    store.setup()
    return store


@pytest.fixture
def memory_store(clock):
    return create_collection_store(Settings(storage_backend="memory"), clock=clock)


@pytest.fixture
def db(json_store):
    """Database over a temp directory; isolated per test."""
    return Database(json_store)


@pytest.fixture
def ticking_now(monkeypatch):
    """
    Make record timestamps strictly increasing, one second apart.

    Returns the list of issued timestamps.
    """
    issued: list[datetime] = []
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def fake_utcnow() -> datetime:
        value = base + timedelta(seconds=len(issued))
        issued.append(value)
        return value

    monkeypatch.setattr("manager.crud.utcnow", fake_utcnow)
    return issued


@pytest.fixture
def fail_writes(monkeypatch):
    """
    Make a store's backend raise OSError when writing some collections.

    Usage: fail_writes(store, Collection.POSTS); no collections means all.
    """
    def install(store, *collections):
        original = store._write

        def failing_write(descriptor, payload):
            if not collections or descriptor.collection in collections:
                raise OSError("disk full")
            return original(descriptor, payload)

        monkeypatch.setattr(store, "_write", failing_write)

    return install
