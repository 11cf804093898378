"""
Farkle Duel - Realtime Event Definitions

Event types and payloads for match state changes, and the broadcast event
names clients listen for.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from src.engine.base import MatchStatus


class GameEvent(Enum):
    """Events that can occur at a table."""

    PLAYER_JOINED = auto()
    PLAYER_LEFT = auto()
    GAME_STARTED = auto()
    DICE_ROLLED = auto()
    DIE_TOGGLED = auto()
    TURN_BANKED = auto()
    PLAYER_BUST = auto()
    GAME_FINISHED = auto()
    ROOM_LIST_CHANGED = auto()


@dataclass
class EventPayload:
    """Wrapper for realtime event data."""

    event: GameEvent
    room_id: str
    session_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


# Map status transitions to game events
_STATUS_EVENT_MAP: dict[MatchStatus, GameEvent] = {
    MatchStatus.PLAYING: GameEvent.GAME_STARTED,
    MatchStatus.FINISHED: GameEvent.GAME_FINISHED,
}

# Broadcast names understood by the browser client
_WIRE_EVENT_NAMES: dict[GameEvent, str] = {
    GameEvent.GAME_STARTED: "game_start",
    GameEvent.DICE_ROLLED: "roll_result",
    GameEvent.ROOM_LIST_CHANGED: "room_list",
}

DEFAULT_WIRE_EVENT = "game_state_update"


def classify_status_change(
    old_status: MatchStatus, new_status: MatchStatus
) -> GameEvent | None:
    """Determine the game event for a match status transition."""
    if new_status != old_status:
        return _STATUS_EVENT_MAP.get(new_status)
    return None


def wire_event_name(event: GameEvent) -> str:
    """Broadcast event name used for a game event."""
    return _WIRE_EVENT_NAMES.get(event, DEFAULT_WIRE_EVENT)
