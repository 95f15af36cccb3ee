"""Tests for session storage and the fallback cache."""
import json

import pytest
from hlsa.services.store import SessionStore, TTLCache, get_session_store


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestTTLCache:
    """Tests for TTLCache."""

    def test_set_and_get(self):
        cache = TTLCache()
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert "a" in cache
        assert cache.get("missing", "default") == "default"

    def test_entries_expire(self):
        clock = FakeClock()
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("a", 1)

        clock.now = 9.9
        assert cache.get("a") == 1
        clock.now = 10.0
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_oldest_entry_evicted(self):
        cache = TTLCache(max_entries=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)

        assert "a" not in cache
        assert cache.get("b") == 2
        assert cache.get("c") == 3
        assert len(cache) == 2

    def test_rewrite_refreshes_entry(self):
        cache = TTLCache(max_entries=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        cache.set("c", 3)

        assert cache.get("a") == 10
        assert "b" not in cache

    def test_append(self):
        cache = TTLCache()
        cache.append("items", 1)
        cache.append("items", 2)
        assert cache.get("items") == [1, 2]


class TestSessionStore:
    """Tests for SessionStore with working files."""

    def test_create_and_get_session(self, tmp_path):
        store = SessionStore(data_dir=str(tmp_path))
        session = store.create_session()

        assert store.get_session(session.id) == session
        assert store.status == "durable"

        lines = (tmp_path / "sessions.jsonl").read_text(encoding="utf-8").splitlines()
        assert json.loads(lines[0])["id"] == session.id

    def test_unknown_session(self, tmp_path):
        store = SessionStore(data_dir=str(tmp_path))
        assert store.get_session("nope") is None
        assert store.get_session_bundle("nope") is None

    def test_interactions_kept_per_session(self, tmp_path):
        store = SessionStore(data_dir=str(tmp_path))
        first = store.create_session()
        second = store.create_session()

        store.add_interaction(first.id, "Q1", "R1", follow_up_question="F1", depth=2)
        store.add_interaction(first.id, "Q2", "R2")
        store.add_interaction(second.id, "Q3", "R3")

        interactions = store.get_interactions(first.id)
        assert [i.question for i in interactions] == ["Q1", "Q2"]
        assert interactions[0].follow_up_question == "F1"
        assert interactions[0].depth == 2

    def test_bundle(self, tmp_path):
        store = SessionStore(data_dir=str(tmp_path))
        session = store.create_session()
        store.add_interaction(session.id, "Q", "R")

        bundle = store.get_session_bundle(session.id)
        assert bundle.session.id == session.id
        assert len(bundle.interactions) == 1
        assert bundle.analysis_results == []

    def test_invalid_lines_skipped(self, tmp_path):
        store = SessionStore(data_dir=str(tmp_path))
        session = store.create_session()
        with open(tmp_path / "sessions.jsonl", "a", encoding="utf-8") as f:
            f.write("{not json\n")
        assert store.get_session(session.id) == session


class TestFallback:
    """Tests for the in-memory fallback."""

    def test_unwritable_directory_falls_back(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        store = SessionStore(data_dir=str(blocker / "store"))

        session = store.create_session()
        store.add_interaction(session.id, "Q", "R")

        assert store.status == "degraded"
        assert store.get_session(session.id) == session
        assert [i.response for i in store.get_interactions(session.id)] == ["R"]

    def test_disabled_storage_uses_memory(self, tmp_path):
        store = SessionStore(data_dir=str(tmp_path), enabled=False)
        session = store.create_session()
        store.add_interaction(session.id, "Q", "R")

        assert store.status == "memory"
        assert store.get_session_bundle(session.id).interactions[0].question == "Q"
        assert list(tmp_path.iterdir()) == []

    def test_injected_cache_used(self, tmp_path):
        cache = TTLCache(max_entries=2, ttl_seconds=60)
        store = SessionStore(data_dir=str(tmp_path), cache=cache, enabled=False)

        assert store.cache is cache
        session = store.create_session()
        assert f"session:{session.id}" in cache

    def test_cached_records_expire(self, tmp_path):
        clock = FakeClock()
        store = SessionStore(
            data_dir=str(tmp_path),
            cache=TTLCache(ttl_seconds=60, clock=clock),
            enabled=False,
        )
        session = store.create_session()
        clock.now = 61
        assert store.get_session(session.id) is None


def test_get_session_store_singleton():
    assert get_session_store() is get_session_store()


@pytest.mark.parametrize("enabled,expected", [(True, "durable"), (False, "memory")])
def test_status(tmp_path, enabled, expected):
    assert SessionStore(data_dir=str(tmp_path), enabled=enabled).status == expected
