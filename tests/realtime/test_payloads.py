"""Farkle Duel - Wire Payload Tests"""

import pytest
from pydantic import ValidationError

from src.engine.match import Match
from src.realtime.payloads import (
    ErrorMessage,
    Intent,
    JoinIntent,
    MatchState,
    ToggleIntent,
    parse_intent,
    session_tag,
)


class TestParseIntent:
    def test_join(self):
        intent = parse_intent("join_game", {"session_id": "sid-a", "player_name": "Alice"})
        assert isinstance(intent, JoinIntent)
        assert intent.player_name == "Alice"

    def test_toggle_coerces_numeric_string(self):
        intent = parse_intent("toggle_die", {"session_id": "sid-a", "die_id": "7"})
        assert isinstance(intent, ToggleIntent)
        assert intent.die_id == 7

    @pytest.mark.parametrize("event", ["roll", "bank", "restart", "leave_game"])
    def test_bare_intents(self, event):
        intent = parse_intent(event, {"session_id": "sid-a"})
        assert type(intent) is Intent

    def test_unknown_event(self):
        with pytest.raises(KeyError):
            parse_intent("cheat", {"session_id": "sid-a"})

    def test_missing_session(self):
        with pytest.raises(ValidationError):
            parse_intent("roll", {})

    def test_join_without_name(self):
        with pytest.raises(ValidationError):
            parse_intent("join_game", {"session_id": "sid-a", "player_name": ""})

    def test_toggle_without_die(self):
        with pytest.raises(ValidationError):
            parse_intent("toggle_die", {"session_id": "sid-a"})


class TestSessionTag:
    def test_stable_and_short(self):
        assert session_tag("sid-a") == session_tag("sid-a")
        assert len(session_tag("sid-a")) == 16

    def test_distinct_sessions_differ(self):
        assert session_tag("sid-a") != session_tag("sid-b")

    def test_does_not_contain_the_id(self):
        assert "sid-a" not in session_tag("sid-a")


class TestMatchState:
    def test_from_snapshot(self, match):
        match.roll("sid-alice")
        state = MatchState.from_snapshot(match.snapshot().to_dict())

        assert state.status == "playing"
        assert len(state.current_dice) == 6
        assert state.players[1].display_name == "Bob"
        assert state.players[1].tag == session_tag("sid-bob")

    def test_identity_never_reaches_the_wire(self, match):
        wire = MatchState.from_snapshot(match.snapshot().to_dict()).model_dump(mode="json")

        assert "identity" not in wire["players"][0]
        assert "sid-alice" not in str(wire)
        assert "sid-bob" not in str(wire)

    def test_empty_seats(self):
        state = MatchState.from_snapshot(Match("Table 1").snapshot().to_dict())
        assert state.players == [None, None]
        assert state.status == "waiting"

    def test_tie_winner(self, match):
        data = match.snapshot().to_dict()
        data.update(status="finished", winner="tie")
        assert MatchState.from_snapshot(data).winner == "tie"

    def test_rejects_bad_face(self, match):
        data = match.snapshot().to_dict()
        data["current_dice"] = [{"id": 1, "face": 7, "selected": False}]
        with pytest.raises(ValidationError):
            MatchState.from_snapshot(data)


class TestErrorMessage:
    def test_dump(self):
        msg = ErrorMessage(to=session_tag("sid-a"), code="room_full", message="Room Full")
        assert msg.model_dump() == {
            "to": session_tag("sid-a"),
            "code": "room_full",
            "message": "Room Full",
        }
