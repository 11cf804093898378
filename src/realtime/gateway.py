"""
Farkle Duel - Realtime Gateway

Carries intents and state over Supabase Realtime broadcast channels.

Topics per room:
    intake:<name>  private; clients post intents, only the server reads
    room:<name>    public; the server broadcasts state, clients track presence
    lobby          public; room list requests and updates

Intents carry the sender's session id, so they go to the private intake
topic (a Realtime Authorization policy lets clients insert there but not
read). Nothing the server broadcasts contains a session id.

A client tracks presence on its room topic keyed by its session tag. When
the last presence for a tag leaves, the session is treated as gone, the
same as an explicit leave_game.

Uses a background thread with an asyncio event loop since the Realtime
client is async-only.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Awaitable, Callable

from pydantic import ValidationError
from supabase import AsyncClient

from src.engine.errors import GameError
from src.realtime.events import EventPayload, GameEvent, wire_event_name
from src.realtime.payloads import (
    INTENT_MODELS,
    ErrorMessage,
    Intent,
    MatchState,
    RoomSummaryMessage,
    parse_intent,
    session_tag,
)
from src.session.service import MatchService

logger = logging.getLogger(__name__)

LOBBY = "lobby"
LOBBY_REQUESTS = ("list_rooms",)
PRIVATE_CHANNEL = {"config": {"private": True}}


def channel_name(room_id: str) -> str:
    """Public topic for a room, or the lobby."""
    if room_id == LOBBY:
        return LOBBY
    return f"room:{room_id}"


def intake_name(room_id: str) -> str:
    """Private topic a room's intents arrive on."""
    return f"intake:{room_id}"


class RealtimeGateway:
    """Bridges Supabase broadcast channels and the MatchService.

    Channel callbacks run on the gateway's event loop thread; the bust
    timer publishes from its own thread. Both go through publish(), which
    only schedules the send on the loop.

    Args:
        service: Where intents are applied
        client: A ready async Supabase client
        client_factory: Builds the client on the loop when none is given
    """

    def __init__(
        self,
        service: MatchService,
        client: AsyncClient | None = None,
        client_factory: Callable[[], Awaitable[AsyncClient]] | None = None,
    ) -> None:
        if client is None and client_factory is None:
            raise ValueError("Either client or client_factory is required.")
        self._client = client
        self._client_factory = client_factory
        self._service = service
        self._channels: dict[str, Any] = {}
        self._intakes: dict[str, Any] = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

        service.add_listener(self.publish_event)

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        """Start the background event loop if not running."""
        with self._lock:
            if self._loop is None or not self._loop.is_running():
                self._loop = asyncio.new_event_loop()
                self._thread = threading.Thread(
                    target=self._run_loop, daemon=True, name="realtime-loop"
                )
                self._thread.start()
            return self._loop

    def _run_loop(self) -> None:
        """Run the asyncio event loop in the background thread."""
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    # -- Subscriptions ----------------------------------------------------

    def open(self, room_ids: list[str]) -> None:
        """Subscribe to the lobby and every listed room."""
        self.subscribe(LOBBY)
        for room_id in room_ids:
            self.subscribe(room_id)

    def subscribe(self, room_id: str) -> None:
        """Listen on a room's topics (or the lobby)."""
        if room_id in self._channels:
            logger.warning("Already subscribed to %s", room_id)
            return

        loop = self._ensure_loop()
        future = asyncio.run_coroutine_threadsafe(
            self._subscribe_async(room_id), loop
        )
        future.result(timeout=10)

    async def _subscribe_async(self, room_id: str) -> None:
        """Set up the channels for a room."""
        if self._client is None:
            self._client = await self._client_factory()
        realtime = self._client.realtime

        if room_id == LOBBY:
            channel = realtime.channel(LOBBY)
            for event in LOBBY_REQUESTS:
                channel.on_broadcast(
                    event, lambda payload: self._publish_room_list()
                )
            await self._join(channel, room_id)
            self._channels[room_id] = channel
            return

        intake = realtime.channel(intake_name(room_id), PRIVATE_CHANNEL)
        for event in INTENT_MODELS:
            intake.on_broadcast(
                event,
                lambda payload, e=event: self._handle_broadcast(room_id, e, payload),
            )
        await self._join(intake, intake_name(room_id))

        channel = realtime.channel(channel_name(room_id))
        channel.on_presence_leave(
            lambda key, current, left: self._handle_presence_leave(room_id, key, current)
        )
        await self._join(channel, channel_name(room_id))

        self._intakes[room_id] = intake
        self._channels[room_id] = channel
        logger.info("Subscribed to %s", room_id)

    async def _join(self, channel: Any, topic: str) -> None:
        await channel.subscribe(
            callback=lambda state, err: self._on_subscribe_state(state, err, topic)
        )

    def _on_subscribe_state(
        self, state: str, error: Exception | None, topic: str
    ) -> None:
        """Log subscription state changes."""
        if error:
            logger.error("Subscription error for %s: %s", topic, error)
        else:
            logger.debug("Channel %s state: %s", topic, state)

    def unsubscribe(self, room_id: str) -> None:
        """Stop listening on a room's topics."""
        channels = [
            c for c in (self._intakes.pop(room_id, None), self._channels.pop(room_id, None))
            if c is not None
        ]
        if not channels:
            return

        loop = self._ensure_loop()
        for channel in channels:
            future = asyncio.run_coroutine_threadsafe(
                self._unsubscribe_async(channel), loop
            )
            try:
                future.result(timeout=10)
            except Exception:
                logger.exception("Error unsubscribing from %s", room_id)

        logger.info("Unsubscribed from %s", room_id)

    async def _unsubscribe_async(self, channel: Any) -> None:
        try:
            await channel.unsubscribe()
            await self._client.realtime.remove_channel(channel)
        except Exception:
            logger.exception("Error removing channel")

    def unsubscribe_all(self) -> None:
        for room_id in list(self._channels.keys()):
            self.unsubscribe(room_id)

    @property
    def active_subscriptions(self) -> list[str]:
        return list(self._channels.keys())

    def shutdown(self) -> None:
        """Stop the background event loop and clean up."""
        self._service.remove_listener(self.publish_event)
        self.unsubscribe_all()
        if self._loop and self._loop.is_running():
            self._loop.call_soon_threadsafe(self._loop.stop)
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5)
        self._loop = None
        self._thread = None

    # -- Inbound ----------------------------------------------------------

    def _handle_broadcast(
        self, room_id: str, event: str, payload: dict[str, Any]
    ) -> None:
        """Validate and apply one inbound intent."""
        try:
            data = payload.get("payload", payload) or {}
            intent = parse_intent(event, data)
        except (KeyError, ValidationError) as exc:
            logger.warning("Malformed %s on %s: %s", event, room_id, exc)
            return
        except Exception:
            logger.exception("Error reading %s on %s", event, room_id)
            return

        try:
            self._apply(room_id, event, intent)
        except GameError as exc:
            self.publish(room_id, "error", ErrorMessage(
                to=session_tag(intent.session_id),
                code=exc.code,
                message=str(exc),
            ).model_dump())
        except Exception:
            logger.exception("Error handling %s on %s", event, room_id)

    def _apply(self, room_id: str, event: str, intent: Intent) -> None:
        session_id = intent.session_id
        if event == "join_game":
            self._service.join(room_id, session_id, intent.player_name)
        elif event == "roll":
            self._service.roll(room_id, session_id)
        elif event == "toggle_die":
            self._service.toggle_selection(room_id, session_id, intent.die_id)
        elif event == "bank":
            self._service.bank(room_id, session_id)
        elif event == "restart":
            self._service.restart(room_id)
        elif event == "leave_game":
            self._service.leave(session_id)

    def _handle_presence_leave(
        self, room_id: str, tag: str, remaining: list[Any]
    ) -> None:
        """Drop a seated session once its last presence is gone."""
        if remaining:
            return
        try:
            for session_id in self._service.registry.sessions_in(room_id):
                if session_tag(session_id) == tag:
                    logger.info("Presence %s left %s", tag, room_id)
                    self._service.leave(session_id)
        except Exception:
            logger.exception("Error handling presence leave on %s", room_id)

    # -- Outbound ---------------------------------------------------------

    def publish_event(self, payload: EventPayload) -> None:
        """Service listener: broadcast a state change."""
        if payload.event is GameEvent.ROOM_LIST_CHANGED:
            self._publish_rooms(payload.data["rooms"])
            return

        body = dict(payload.data)
        body["state"] = MatchState.from_snapshot(body["state"]).model_dump(mode="json")
        if payload.session_id is not None:
            body["actor"] = session_tag(payload.session_id)
        self.publish(payload.room_id, wire_event_name(payload.event), body)

    def _publish_room_list(self) -> None:
        self._publish_rooms([room.to_dict() for room in self._service.room_list()])

    def _publish_rooms(self, rooms: list[dict[str, Any]]) -> None:
        body = {
            "rooms": [
                RoomSummaryMessage.model_validate(room).model_dump() for room in rooms
            ]
        }
        self.publish(LOBBY, "room_list", body)

    def publish(
        self, room_id: str, event: str, body: dict[str, Any]
    ) -> concurrent.futures.Future | None:
        """Schedule a broadcast on a room's public channel.

        Returns:
            Future of the send, or None if the room has no channel
        """
        channel = self._channels.get(room_id)
        loop = self._loop
        if channel is None or loop is None or not loop.is_running():
            logger.warning("No open channel for %s, dropping %s", room_id, event)
            return None

        future = asyncio.run_coroutine_threadsafe(
            channel.send_broadcast(event, body), loop
        )
        future.add_done_callback(
            lambda f: self._on_publish_done(f, room_id, event)
        )
        return future

    def _on_publish_done(
        self, future: concurrent.futures.Future, room_id: str, event: str
    ) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Broadcast %s to %s failed: %s", event, room_id, error)
