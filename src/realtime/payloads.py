"""
Farkle Duel - Wire Payloads

Pydantic models for what crosses the realtime channels: intents sent by
clients, and the state, error and room-list messages sent back.

A session id is a bearer secret shared only by a client and the server.
It travels inbound (on the private intake topic) and never outbound:
everything the server broadcasts names a session by its tag, a one-way
hash the owning client can compute for itself.
"""

import hashlib
from typing import Any, Literal

from pydantic import BaseModel, Field


def session_tag(session_id: str) -> str:
    """Public handle for a session; cannot be turned back into the id."""
    return hashlib.sha256(session_id.encode("utf-8")).hexdigest()[:16]


class Intent(BaseModel):
    """Base for every client intent; `session_id` identifies the sender."""

    session_id: str = Field(min_length=1, max_length=128)


class JoinIntent(Intent):
    player_name: str = Field(min_length=1, max_length=30)


class ToggleIntent(Intent):
    die_id: int


# Inbound broadcast event name -> payload model
INTENT_MODELS: dict[str, type[Intent]] = {
    "join_game": JoinIntent,
    "roll": Intent,
    "toggle_die": ToggleIntent,
    "bank": Intent,
    "restart": Intent,
    "leave_game": Intent,
}


def parse_intent(event: str, data: dict) -> Intent:
    """Validate an inbound broadcast payload.

    Raises:
        KeyError: Unknown intent event
        ValidationError: Payload does not match the intent's model
    """
    return INTENT_MODELS[event].model_validate(data)


class DieState(BaseModel):
    id: int
    face: int = Field(ge=1, le=6)
    selected: bool


class PlayerState(BaseModel):
    tag: str
    display_name: str
    total_score: int = Field(ge=0)
    connected: bool


class MatchState(BaseModel):
    """The contract the client renders; built from MatchSnapshot.to_dict()."""

    room_id: str
    players: list[PlayerState | None] = Field(min_length=2, max_length=2)
    current_seat: int = Field(ge=0, le=1)
    round_score: int = Field(ge=0)
    dice_to_roll: int = Field(ge=1, le=6)
    current_dice: list[DieState] = Field(default_factory=list)
    status: Literal["waiting", "playing", "finished"]
    winner: int | Literal["tie"] | None = None
    final_round_active: bool = False
    final_round_trigger_seat: int | None = None
    bust_pending: bool = False
    win_score: int

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> "MatchState":
        """Wire state for a snapshot dict, each player's identity replaced by its tag."""
        players = [
            None if player is None else {
                "tag": session_tag(player["identity"]),
                "display_name": player["display_name"],
                "total_score": player["total_score"],
                "connected": player["connected"],
            }
            for player in data["players"]
        ]
        return cls.model_validate({**data, "players": players})


class RoomSummaryMessage(BaseModel):
    name: str
    count: int = Field(ge=0)
    max: int
    status: Literal["waiting", "playing", "finished"]


class ErrorMessage(BaseModel):
    """Rejected intent, addressed by tag to the session that sent it."""

    to: str | None = None
    code: str
    message: str


__all__ = [
    "DieState",
    "ErrorMessage",
    "INTENT_MODELS",
    "Intent",
    "JoinIntent",
    "MatchState",
    "PlayerState",
    "RoomSummaryMessage",
    "ToggleIntent",
    "parse_intent",
    "session_tag",
]
