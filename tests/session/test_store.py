"""Farkle Duel - Match Store and Session Registry Tests"""

import pytest

from src.engine.base import ScoringRules
from src.engine.errors import UnknownRoomError
from src.session.registry import SessionRegistry
from src.session.store import MatchStore, RoomSummary


class TestMatchStore:
    def test_configured_rooms_exist_up_front(self):
        store = MatchStore(room_names=["Table 1", "Table 2"])
        assert store.room_ids == ["Table 1", "Table 2"]
        assert "Table 1" in store
        assert len(store) == 2

    def test_get_returns_same_match(self):
        store = MatchStore(room_names=["Table 1"])
        assert store.get("Table 1") is store.get("Table 1")

    def test_fixed_store_rejects_unknown_room(self):
        store = MatchStore(room_names=["Table 1"])
        with pytest.raises(UnknownRoomError):
            store.get("Table 9")

    def test_open_store_creates_on_first_reference(self):
        store = MatchStore(fixed=False)
        match = store.get("side-room")
        assert match.room_id == "side-room"
        assert "side-room" in store

    def test_matches_share_rules(self):
        rules = ScoringRules(win_score=5000)
        store = MatchStore(rules, room_names=["A", "B"])
        assert store.get("A").rules is rules
        assert store.get("B").rules is rules

    def test_discard_fixed_room_replaces_match(self):
        store = MatchStore(room_names=["Table 1"])
        old = store.get("Table 1")
        store.discard("Table 1")
        assert store.get("Table 1") is not old

    def test_discard_open_room_removes_it(self):
        store = MatchStore(fixed=False)
        store.get("side-room")
        store.discard("side-room")
        assert "side-room" not in store

    def test_room_list(self):
        store = MatchStore(room_names=["Table 1", "Table 2"])
        store.get("Table 1").join("sid-a", "Alice")

        rooms = store.room_list()

        assert rooms[0] == RoomSummary(name="Table 1", count=1, max=2, status="waiting")
        assert rooms[1].count == 0

    def test_room_list_counts_only_connected(self):
        store = MatchStore(room_names=["Table 1"])
        match = store.get("Table 1")
        match.join("sid-a", "Alice")
        match.join("sid-b", "Bob")
        match.leave("sid-b")

        summary = store.room_list()[0]
        assert summary.count == 1
        assert summary.status == "playing"


class TestSessionRegistry:
    def test_bind_and_lookup(self):
        registry = SessionRegistry()
        registry.bind("sid-a", "Table 1")
        assert registry.room_of("sid-a") == "Table 1"
        assert registry.sessions_in("Table 1") == ["sid-a"]

    def test_unbind_returns_room(self):
        registry = SessionRegistry()
        registry.bind("sid-a", "Table 1")
        assert registry.unbind("sid-a") == "Table 1"
        assert registry.room_of("sid-a") is None
        assert len(registry) == 0

    def test_unbind_unknown(self):
        assert SessionRegistry().unbind("sid-x") is None
