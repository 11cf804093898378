"""
Farkle Duel - Realtime Event Tests

Status-change classification and broadcast event names.
"""

from src.engine.base import MatchStatus
from src.realtime.events import (
    DEFAULT_WIRE_EVENT,
    EventPayload,
    GameEvent,
    classify_status_change,
    wire_event_name,
)


class TestClassifyStatusChange:
    def test_waiting_to_playing(self):
        assert classify_status_change(
            MatchStatus.WAITING, MatchStatus.PLAYING
        ) is GameEvent.GAME_STARTED

    def test_playing_to_finished(self):
        assert classify_status_change(
            MatchStatus.PLAYING, MatchStatus.FINISHED
        ) is GameEvent.GAME_FINISHED

    def test_finished_to_playing_is_a_restart(self):
        assert classify_status_change(
            MatchStatus.FINISHED, MatchStatus.PLAYING
        ) is GameEvent.GAME_STARTED

    def test_same_status(self):
        assert classify_status_change(MatchStatus.PLAYING, MatchStatus.PLAYING) is None

    def test_back_to_waiting_has_no_event(self):
        assert classify_status_change(MatchStatus.PLAYING, MatchStatus.WAITING) is None


class TestWireEventName:
    def test_named_events(self):
        assert wire_event_name(GameEvent.GAME_STARTED) == "game_start"
        assert wire_event_name(GameEvent.DICE_ROLLED) == "roll_result"
        assert wire_event_name(GameEvent.ROOM_LIST_CHANGED) == "room_list"

    def test_everything_else_is_a_state_update(self):
        for event in (
            GameEvent.PLAYER_JOINED,
            GameEvent.DIE_TOGGLED,
            GameEvent.TURN_BANKED,
            GameEvent.PLAYER_BUST,
            GameEvent.GAME_FINISHED,
        ):
            assert wire_event_name(event) == DEFAULT_WIRE_EVENT


class TestEventPayload:
    def test_defaults(self):
        payload = EventPayload(event=GameEvent.PLAYER_BUST, room_id="Table 1")
        assert payload.session_id is None
        assert payload.data == {}
