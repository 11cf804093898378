"""
Farkle Duel Session Layer.

Match store, session lookup, per-match serialization and the bust timer.
"""

from src.session.registry import SessionRegistry
from src.session.scheduler import BustScheduler
from src.session.service import MatchService
from src.session.store import MatchStore, RoomSummary

__all__ = [
    "BustScheduler",
    "MatchService",
    "MatchStore",
    "RoomSummary",
    "SessionRegistry",
]
