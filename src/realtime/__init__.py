"""
Farkle Duel Real-time Sync.

Broadcast channels, wire payloads and event names for multiplayer play.
The channel bridge lives in src.realtime.gateway (it depends on the
session layer, which itself reports through these events).
"""

from src.realtime.events import EventPayload, GameEvent, wire_event_name
from src.realtime.payloads import ErrorMessage, MatchState, parse_intent, session_tag

__all__ = [
    "ErrorMessage",
    "EventPayload",
    "GameEvent",
    "MatchState",
    "parse_intent",
    "session_tag",
    "wire_event_name",
]
