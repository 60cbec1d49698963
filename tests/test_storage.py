"""Tests for the persistence scopes."""
import json

import pytest

from caterpillar_ranch.core.errors import StorageScopeError
from caterpillar_ranch.core.session import SessionManager
from caterpillar_ranch.core.storage import (
    DurableStore,
    InMemoryDurableStore,
    InMemorySessionStore,
    JsonFileDurableStore,
    SessionStore,
    build_durable_store,
    require_scope,
)


def test_json_file_store_round_trip(tmp_path):
    store = JsonFileDurableStore(str(tmp_path))
    store.put("cart:abc", {"items": [1, 2]})

    assert store.get("cart:abc") == {"items": [1, 2]}
    assert list(store.keys()) == ["cart:abc"]
    assert store.get("cart:missing") is None


def test_json_file_store_survives_restart(tmp_path):
    JsonFileDurableStore(str(tmp_path)).put("discounts:abc", {"cr-001": {"percent": 20}})

    reopened = JsonFileDurableStore(str(tmp_path))
    assert reopened.get("discounts:abc") == {"cr-001": {"percent": 20}}


def test_json_file_store_writes_complete_files(tmp_path):
    store = JsonFileDurableStore(str(tmp_path))
    store.put("cart:abc", {"n": 1})
    store.put("cart:abc", {"n": 2})

    files = list(tmp_path.iterdir())
    assert len(files) == 1
    assert json.loads(files[0].read_text()) == {"n": 2}


def test_json_file_store_delete(tmp_path):
    store = JsonFileDurableStore(str(tmp_path))
    store.put("cart:abc", {})

    assert store.delete("cart:abc") is True
    assert store.delete("cart:abc") is False
    assert list(store.keys()) == []


def test_memory_store_returns_copies():
    store = InMemoryDurableStore()
    store.put("k", {"items": []})
    store.get("k")["items"].append("leak")

    assert store.get("k") == {"items": []}


def test_scopes_are_distinct():
    assert isinstance(InMemoryDurableStore(), DurableStore)
    assert not isinstance(InMemoryDurableStore(), SessionStore)
    assert isinstance(InMemorySessionStore(), SessionStore)
    assert not isinstance(InMemorySessionStore(), DurableStore)

    with pytest.raises(StorageScopeError):
        require_scope(InMemorySessionStore(), DurableStore, "cart")


def test_build_durable_store(tmp_path):
    assert isinstance(build_durable_store(None), InMemoryDurableStore)
    assert isinstance(build_durable_store(str(tmp_path / "data")), JsonFileDurableStore)


def test_cleanup_ends_idle_sessions(clock):
    manager = SessionManager(clock=clock)
    stale = manager.create_session()
    clock.advance(minutes=60 * 25)
    fresh = manager.create_session()

    assert manager.cleanup_old_sessions(max_age_hours=24) == 1
    assert manager.get_session(stale.session_id) is None
    assert manager.get_session(fresh.session_id) is fresh
