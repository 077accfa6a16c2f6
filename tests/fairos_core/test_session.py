"""Tests for the in-memory session store."""

from fairos_core.session import InMemorySessionStore
from fairos_core.types import SessionStore


class TestInMemorySessionStore:

    def test_empty_store_has_no_cookie(self):
        store = InMemorySessionStore()
        assert store.cookie("alice") is None
        assert len(store) == 0

    def test_set_and_get(self):
        store = InMemorySessionStore()
        store.set_cookie("alice", "token-1")

        assert store.cookie("alice") == "token-1"
        assert "alice" in store

    def test_set_replaces_previous_token(self):
        store = InMemorySessionStore({"alice": "token-1"})
        store.set_cookie("alice", "token-2")

        assert store.cookie("alice") == "token-2"
        assert len(store) == 1

    def test_remove(self):
        store = InMemorySessionStore({"alice": "token-1", "bob": "token-2"})
        store.remove_cookie("alice")

        assert store.cookie("alice") is None
        assert list(store) == ["bob"]

    def test_remove_missing_is_noop(self):
        store = InMemorySessionStore()
        store.remove_cookie("nobody")
        assert len(store) == 0

    def test_stores_are_independent(self):
        first = InMemorySessionStore()
        second = InMemorySessionStore()
        first.set_cookie("alice", "token-1")

        assert second.cookie("alice") is None

    def test_initial_mapping_is_copied(self):
        initial = {"alice": "token-1"}
        store = InMemorySessionStore(initial)
        store.remove_cookie("alice")

        assert initial == {"alice": "token-1"}

    def test_repr_hides_tokens(self):
        store = InMemorySessionStore({"alice": "secret-token"})

        assert "secret-token" not in repr(store)
        assert "alice" in repr(store)

    def test_satisfies_protocol(self):
        store: SessionStore = InMemorySessionStore()
        store.set_cookie("alice", "t")
        assert store.cookie("alice") == "t"
