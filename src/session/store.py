"""
Farkle Duel - Match Store

Owns every Match on the server, keyed by room id. The store is created by
the application and handed to whoever needs it; there is no module-level
registry.
"""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import asdict, dataclass
from typing import Callable, Iterator

from src.engine.base import DEFAULT_RULES, NUM_SEATS, ScoringRules
from src.engine.errors import UnknownRoomError
from src.engine.match import Match

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoomSummary:
    """One row of the lobby's room list."""
    name: str
    count: int
    max: int
    status: str

    def to_dict(self) -> dict:
        return asdict(self)


class MatchStore:
    """In-memory home for the server's matches.

    Args:
        rules: Rule table given to every match
        room_names: Rooms created up front, in lobby order
        fixed: Only the configured rooms exist; unknown ids are rejected
        rng_factory: Builds the die source for each new match
    """

    def __init__(
        self,
        rules: ScoringRules = DEFAULT_RULES,
        room_names: list[str] | None = None,
        *,
        fixed: bool = True,
        rng_factory: Callable[[], random.Random] = random.Random,
    ) -> None:
        self._rules = rules
        self._fixed = fixed
        self._rng_factory = rng_factory
        self._matches: dict[str, Match] = {}
        self._lock = threading.Lock()

        for name in room_names or []:
            self._matches[name] = self._create(name)

    def _create(self, room_id: str) -> Match:
        logger.debug("Creating match for room %s", room_id)
        return Match(room_id, rules=self._rules, rng=self._rng_factory())

    def get(self, room_id: str) -> Match:
        """Return the match for a room, creating it on first reference.

        Raises:
            UnknownRoomError: The store is fixed and the room is not configured
        """
        with self._lock:
            match = self._matches.get(room_id)
            if match is None:
                if self._fixed:
                    raise UnknownRoomError()
                match = self._create(room_id)
                self._matches[room_id] = match
            return match

    def discard(self, room_id: str) -> None:
        """Forget a room. Fixed rooms are replaced with a fresh match."""
        with self._lock:
            if room_id not in self._matches:
                return
            if self._fixed:
                self._matches[room_id] = self._create(room_id)
            else:
                del self._matches[room_id]
        logger.info("Discarded match for room %s", room_id)

    def room_list(self) -> list[RoomSummary]:
        """Summaries of every room, in creation order."""
        with self._lock:
            matches = list(self._matches.values())
        return [
            RoomSummary(
                name=match.room_id,
                count=match.connected_count,
                max=NUM_SEATS,
                status=match.status.value,
            )
            for match in matches
        ]

    @property
    def room_ids(self) -> list[str]:
        with self._lock:
            return list(self._matches)

    def __contains__(self, room_id: object) -> bool:
        with self._lock:
            return room_id in self._matches

    def __iter__(self) -> Iterator[Match]:
        with self._lock:
            return iter(list(self._matches.values()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._matches)
