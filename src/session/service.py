"""
Farkle Duel - Match Service

The boundary the transport calls into. Every operation on a match runs
under that match's lock, so intents arriving concurrently from different
connections are applied one at a time. Each successful transition is
reported to listeners as an EventPayload while the lock is still held,
which keeps broadcasts in the same order as the state changes.

Listeners must not call back into the service for the same room.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import asdict
from typing import Callable, Iterator

from src.engine.base import MatchSnapshot, MatchStatus, RollResult
from src.engine.errors import GameError
from src.engine.match import Match
from src.realtime.events import EventPayload, GameEvent, classify_status_change
from src.session.registry import SessionRegistry
from src.session.scheduler import BustScheduler
from src.session.store import MatchStore, RoomSummary

logger = logging.getLogger(__name__)

Listener = Callable[[EventPayload], None]


class MatchService:
    """Serializes player intents per match and reports what happened.

    Args:
        store: Where the matches live
        registry: Session to room lookup (a fresh one if omitted)
        scheduler: Runs the delayed bust hand-off (2s threading timer if omitted)
    """

    def __init__(
        self,
        store: MatchStore,
        registry: SessionRegistry | None = None,
        scheduler: BustScheduler | None = None,
    ) -> None:
        self._store = store
        self._registry = registry or SessionRegistry()
        self._scheduler = scheduler or BustScheduler()
        self._listeners: list[Listener] = []
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -- Player intents ---------------------------------------------------

    def join(self, room_id: str, session_id: str, player_name: str) -> MatchSnapshot:
        """Seat a session at a table.

        A session seated elsewhere gives up its old seat only once the new
        one is secured, so a failed join leaves both tables untouched.
        """
        previous = self._registry.room_of(session_id)

        with self._locked(room_id, "join") as match:
            old_status = match.status
            snapshot = match.join(session_id, player_name)
            self._registry.bind(session_id, room_id)
            logger.info(
                "%s joined %s as seat %s", player_name, room_id, match.seat_of(session_id)
            )

            self._emit(GameEvent.PLAYER_JOINED, room_id, session_id, snapshot)
            self._emit_status_change(room_id, old_status, snapshot)
            self._emit_room_list(room_id)

        if previous is not None and previous != room_id:
            self._leave_room(previous, session_id)
        return snapshot

    def leave(self, session_id: str) -> bool:
        """Detach a session from its table, if it has one."""
        room_id = self._registry.unbind(session_id)
        if room_id is None:
            return False
        return self._leave_room(room_id, session_id)

    def _leave_room(self, room_id: str, session_id: str) -> bool:
        with self._locked(room_id, "leave") as match:
            old_status = match.status
            if not match.leave(session_id):
                return False
            snapshot = match.snapshot()
            logger.info("Session %s left %s", session_id, room_id)

            if old_status is not MatchStatus.WAITING and snapshot.status is MatchStatus.WAITING:
                self._scheduler.cancel(room_id)
                logger.info("Game in %s abandoned, table cleared", room_id)

            self._emit(GameEvent.PLAYER_LEFT, room_id, session_id, snapshot)
            self._emit_room_list(room_id)
        return True

    def roll(self, room_id: str, session_id: str) -> RollResult:
        """Roll for the current player; a bust schedules the hand-off."""
        with self._locked(room_id, "roll") as match:
            result = match.roll(session_id)
            snapshot = match.snapshot()
            logger.debug(
                "Roll in %s: %s (bust=%s, hot=%s)",
                room_id, [d.face for d in result.dice], result.bust, result.hot_dice,
            )

            self._emit(
                GameEvent.DICE_ROLLED, room_id, session_id, snapshot,
                dice=[asdict(d) for d in result.dice],
                farkle=result.bust,
                hot_dice=result.hot_dice,
            )

        if result.bust:
            logger.info("Farkle in %s", room_id)
            self._scheduler.schedule(room_id, lambda: self.resolve_bust(room_id))
        return result

    def toggle_selection(self, room_id: str, session_id: str, die_id: int) -> bool:
        """Flip one die's selection; silently ignored when not allowed."""
        with self._locked(room_id, "toggle") as match:
            toggled = match.toggle_selection(session_id, die_id)
            if not toggled:
                logger.debug("Ignored toggle of die %s in %s", die_id, room_id)
                return False

            self._emit(GameEvent.DIE_TOGGLED, room_id, session_id, match.snapshot())
        return True

    def bank(self, room_id: str, session_id: str) -> MatchSnapshot:
        """Commit the current player's round score."""
        with self._locked(room_id, "bank") as match:
            old_status = match.status
            seat = match.current_seat
            snapshot = match.bank(session_id)
            logger.info(
                "Seat %s banked in %s (total %s)",
                seat, room_id, snapshot.players[seat].total_score,
            )

            self._emit(GameEvent.TURN_BANKED, room_id, session_id, snapshot)
            self._emit_status_change(room_id, old_status, snapshot)
        return snapshot

    def resolve_bust(self, room_id: str) -> MatchSnapshot:
        """End a busted turn. No-op if the bust was already dealt with."""
        with self._locked(room_id, "resolve_bust") as match:
            if not match.bust_pending:
                return match.snapshot()

            old_status = match.status
            snapshot = match.resolve_bust()
            logger.debug("Bust resolved in %s, seat %s to play", room_id, snapshot.current_seat)

            self._emit(GameEvent.PLAYER_BUST, room_id, None, snapshot)
            self._emit_status_change(room_id, old_status, snapshot)
        return snapshot

    def restart(self, room_id: str) -> MatchSnapshot:
        """Start a new game at a finished table."""
        with self._locked(room_id, "restart") as match:
            snapshot = match.restart()
            self._scheduler.cancel(room_id)
            logger.info("Restarted %s", room_id)

            self._emit(GameEvent.GAME_STARTED, room_id, None, snapshot)
            self._emit_room_list(room_id)
        return snapshot

    # -- Queries ----------------------------------------------------------

    def snapshot(self, room_id: str) -> MatchSnapshot:
        with self._locked(room_id, "snapshot") as match:
            return match.snapshot()

    def room_list(self) -> list[RoomSummary]:
        return self._store.room_list()

    def discard(self, room_id: str) -> None:
        """Drop a table's match, cancelling any pending bust."""
        with self._lock_for(room_id):
            self._scheduler.cancel(room_id)
            for session_id in self._registry.sessions_in(room_id):
                self._registry.unbind(session_id)
            self._store.discard(room_id)

    def shutdown(self) -> None:
        self._scheduler.shutdown()

    # -- Internals --------------------------------------------------------

    def _lock_for(self, room_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(room_id)
            if lock is None:
                lock = self._locks[room_id] = threading.Lock()
            return lock

    @contextmanager
    def _locked(self, room_id: str, action: str) -> Iterator[Match]:
        """Hold a room's lock; log and re-raise rejected intents.

        The match is looked up under the lock, so an intent queued behind
        discard() sees the replacement match.
        """
        with self._lock_for(room_id):
            try:
                yield self._store.get(room_id)
            except GameError as exc:
                logger.info("Rejected %s in %r: %s", action, room_id, exc)
                raise

    def _emit(
        self,
        event: GameEvent,
        room_id: str,
        session_id: str | None,
        snapshot: MatchSnapshot,
        **extra,
    ) -> None:
        data = {"state": snapshot.to_dict(), **extra}
        self._dispatch(EventPayload(event=event, room_id=room_id, session_id=session_id, data=data))

    def _emit_status_change(
        self, room_id: str, old_status: MatchStatus, snapshot: MatchSnapshot
    ) -> None:
        event = classify_status_change(old_status, snapshot.status)
        if event is None:
            return
        if event is GameEvent.GAME_FINISHED:
            logger.info("Game over in %s, winner: %s", room_id, snapshot.winner)
        self._emit(event, room_id, None, snapshot)
        self._emit_room_list(room_id)

    def _emit_room_list(self, room_id: str) -> None:
        rooms = [room.to_dict() for room in self._store.room_list()]
        self._dispatch(EventPayload(
            event=GameEvent.ROOM_LIST_CHANGED,
            room_id=room_id,
            data={"rooms": rooms},
        ))

    def _dispatch(self, payload: EventPayload) -> None:
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener failed for %s in %s", payload.event.name, payload.room_id)
