"""
Presence and room registry for chat websocket connections.

Two kinds of rooms exist:
    chat_<chat_id>: every connection currently following a chat
    user_<user_id>: every connection of one user (personal room)

The registry keeps the per-process view of which connection sits in which
room, and mirrors every join into the channel layer so that group_send()
reaches connections served by other processes.

Usage:
    registry = RoomRegistry()
    session = ConnectionSession(channel_name, user_id=user.id, user_name="Sofia")
    await registry.register(session)
    await registry.join(session, chat_room(chat.id))
    ...
    await registry.deregister(channel_name)

One registry is built per server process in config/asgi.py and handed to
each consumer through ChatConsumer.as_asgi(registry=...).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def chat_room(chat_id: int) -> str:
    """Room name (and channel layer group) of a chat."""
    return f"chat_{chat_id}"


def user_room(user_id: int) -> str:
    """Personal room name (and channel layer group) of a user."""
    return f"user_{user_id}"


@dataclass
class ConnectionSession:
    """
    One authenticated websocket connection.

    Attributes:
        channel_name: Channel layer name of the consumer
        user_id: Authenticated user
        user_name: Display name used in typing events
        rooms: Rooms this connection has joined
    """

    channel_name: str
    user_id: int
    user_name: str = ""
    rooms: set[str] = field(default_factory=set)


class RoomRegistry:
    """
    Tracks connection sessions and their room memberships.

    Joins are idempotent. Deregistering a session discards every group it
    joined, so disconnecting is the only way to leave a room.
    """

    def __init__(self, channel_layer=None) -> None:
        self._channel_layer = channel_layer
        # channel_name -> session
        self._sessions: dict[str, ConnectionSession] = {}
        # room -> set of channel names
        self._rooms: dict[str, set[str]] = {}
        self._lock = asyncio.Lock()

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    async def register(self, session: ConnectionSession) -> None:
        """Start tracking a freshly accepted connection."""
        async with self._lock:
            self._sessions[session.channel_name] = session
        logger.debug(
            f"Registered session {session.channel_name} for user {session.user_id}"
        )

    async def join(self, session: ConnectionSession, room: str) -> bool:
        """
        Add a connection to a room.

        Returns:
            True if the connection was not in the room before
        """
        async with self._lock:
            members = self._rooms.setdefault(room, set())
            if session.channel_name in members:
                return False
            members.add(session.channel_name)
            session.rooms.add(room)

        await self.channel_layer.group_add(room, session.channel_name)
        logger.debug(f"Session {session.channel_name} joined {room}")
        return True

    async def deregister(self, channel_name: str) -> ConnectionSession | None:
        """
        Forget a connection and remove it from every room it joined.

        Returns:
            The removed session, or None if it was not registered
        """
        async with self._lock:
            session = self._sessions.pop(channel_name, None)
            if session is None:
                return None
            rooms = list(session.rooms)
            for room in rooms:
                members = self._rooms.get(room)
                if members is None:
                    continue
                members.discard(channel_name)
                if not members:
                    del self._rooms[room]

        for room in rooms:
            await self.channel_layer.group_discard(room, channel_name)
        logger.debug(f"Deregistered session {channel_name} from {len(rooms)} rooms")
        return session

    def get_session(self, channel_name: str) -> ConnectionSession | None:
        return self._sessions.get(channel_name)

    def members(self, room: str) -> set[str]:
        """Channel names of the connections in a room (a copy)."""
        return set(self._rooms.get(room, ()))

    def session_count(self) -> int:
        return len(self._sessions)
