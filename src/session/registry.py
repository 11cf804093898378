"""
Farkle Duel - Session Registry

Maps a client session to the room it is seated in, so the transport can
route intents and clean up on disconnect without scanning every match.
"""

import threading


class SessionRegistry:
    """Thread-safe session id -> room id lookup."""

    def __init__(self) -> None:
        self._rooms: dict[str, str] = {}
        self._lock = threading.Lock()

    def bind(self, session_id: str, room_id: str) -> None:
        with self._lock:
            self._rooms[session_id] = room_id

    def room_of(self, session_id: str) -> str | None:
        with self._lock:
            return self._rooms.get(session_id)

    def unbind(self, session_id: str) -> str | None:
        """Forget a session and return the room it was in."""
        with self._lock:
            return self._rooms.pop(session_id, None)

    def sessions_in(self, room_id: str) -> list[str]:
        with self._lock:
            return [s for s, r in self._rooms.items() if r == room_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)
