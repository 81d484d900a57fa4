"""
WebSocket consumer for the request chat.

One connection per client at ws/chat/. The connection follows any number
of chats: it joins the user's personal room on connect, then chat rooms
on request.

Consumers:
    ChatConsumer: Handles the chat websocket

Authentication:
    JWTAuthMiddleware resolves the token before the consumer runs. A refused
    handshake is accepted only to send an error frame with the reason, then
    closed with the code of scope["auth_error"].

Channel Groups:
    chat_<chat_id>: Connections following a chat
    user_<user_id>: All connections of a user

Message Types (from client):
    join_chats, join_chat, send_message, mark_as_read, typing, stop_typing
    (see chat.protocol)

Message Types (to client):
    chats_joined, chat_joined, new_message, message_notification,
    new_request, messages_marked_read, user_typing, user_stop_typing, error
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.db import DatabaseError

from chat.constants import CLOSE_CODES
from chat.protocol import (
    JoinChat,
    JoinChats,
    MarkAsRead,
    ProtocolError,
    SendMessage,
    StopTyping,
    Typing,
    parse_event,
)
from chat.rooms import ConnectionSession, RoomRegistry, chat_room, user_room
from chat.services import ChatService, MessageService, RealtimeNotifier

logger = logging.getLogger(__name__)

# Typing events with a bad chat id are dropped without an error frame
SILENT_EVENT_TYPES = ("typing", "stop_typing")


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for real-time chat.

    Handles:
        - Refusing unauthenticated handshakes
        - Joining the personal room and chat rooms
        - Sending messages and fanning them out
        - Read-state updates
        - Typing indicators

    Attributes:
        registry: Room registry shared by the consumers of this process
        session: ConnectionSession of this connection (after accept)
        user: Authenticated user (after accept)
    """

    registry: RoomRegistry | None = None

    def __init__(self, *args, registry: RoomRegistry | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.registry = registry if registry is not None else RoomRegistry()
        self.session: ConnectionSession | None = None
        self.user = None

    async def connect(self):
        """
        Handle websocket connection.

        When authentication failed the socket is accepted only to send an
        error frame with the reason, then closed with 4001/4002/4003.
        Otherwise registers the session and joins the personal room.
        """
        auth_error = self.scope.get("auth_error")
        user = self.scope.get("user")
        subprotocols = self.scope.get("subprotocols") or []
        await self.accept(subprotocol="jwt" if subprotocols[:1] == ["jwt"] else None)

        if auth_error is not None or user is None or not user.is_authenticated:
            await self._refuse(auth_error)
            return

        self.user = user

        self.session = ConnectionSession(
            channel_name=self.channel_name,
            user_id=user.id,
            user_name=user.get_full_name(),
        )
        await self.registry.register(self.session)
        await self.registry.join(self.session, user_room(user.id))
        logger.info(f"User {user.id} connected to chat gateway")

    async def disconnect(self, close_code):
        """Remove the connection from every room it joined."""
        if self.session is None:
            return
        await self.registry.deregister(self.channel_name)
        logger.info(f"User {self.session.user_id} disconnected ({close_code})")
        self.session = None

    async def receive(self, text_data=None, bytes_data=None, **kwargs):
        """Decode a text frame, reporting undecodable frames to the client."""
        if text_data is None:
            await self.send_error("event must be a JSON object", "INVALID_EVENT")
            return
        try:
            content = await self.decode_json(text_data)
        except ValueError:
            await self.send_error("event must be a JSON object", "INVALID_EVENT")
            return
        await self.receive_json(content, **kwargs)

    async def receive_json(self, content, **kwargs):
        """
        Handle an incoming event.

        Expected format:
            {"type": "send_message", "requestId": 12, "content": "Bonjour"}
        """
        try:
            event = parse_event(content)
        except ProtocolError as e:
            if isinstance(content, dict) and content.get("type") in SILENT_EVENT_TYPES:
                return
            await self.send_error(e.message, e.error_code)
            return

        try:
            match event:
                case JoinChats():
                    await self._handle_join_chats()
                case JoinChat(request_id=request_id):
                    await self._handle_join_chat(request_id)
                case SendMessage(request_id=request_id, content=text):
                    await self._handle_send_message(request_id, text)
                case MarkAsRead(chat_id=chat_id):
                    await self._handle_mark_as_read(chat_id)
                case Typing(chat_id=chat_id):
                    await self._relay_typing(chat_id, "chat.user_typing")
                case StopTyping(chat_id=chat_id):
                    await self._relay_typing(chat_id, "chat.user_stop_typing")
        except DatabaseError:
            logger.exception(
                f"Database error handling {type(event).__name__} "
                f"for user {self.user.id}"
            )
            await self.send_error("operation failed", "OPERATION_FAILED")

    async def _refuse(self, auth_error):
        """Report why the handshake was refused, then close with its code."""
        if auth_error is None:
            message, code, close_code = (
                "credential missing",
                "CREDENTIAL_MISSING",
                CLOSE_CODES.CREDENTIAL_MISSING,
            )
        else:
            message, code, close_code = (
                auth_error.message,
                auth_error.error_code,
                auth_error.close_code,
            )
        await self.send_error(message, code)
        await self.close(code=close_code)

    async def send_error(self, message: str, code: str):
        """Send an error frame to this connection only."""
        await self.send_json({"type": "error", "message": message, "code": code})

    async def _handle_join_chats(self):
        """Join the room of every active chat of the user."""
        chat_ids = await database_sync_to_async(ChatService.get_active_chat_ids)(
            self.user
        )
        for chat_id in chat_ids:
            await self.registry.join(self.session, chat_room(chat_id))
        await self.send_json({"type": "chats_joined", "count": len(chat_ids)})

    async def _handle_join_chat(self, request_id: int):
        """
        Join the room of one request's chat.

        Also marks the other participant's messages as read.
        """
        chat = await database_sync_to_async(ChatService.get_chat_for_request)(
            request_id, self.user
        )
        if chat is None:
            logger.warning(
                f"User {self.user.id} denied joining chat of request {request_id}"
            )
            await self.send_error(
                "channel not found or access denied", "CHAT_NOT_FOUND"
            )
            return

        await self.registry.join(self.session, chat_room(chat.pk))
        await database_sync_to_async(MessageService.mark_as_read)(chat, self.user)
        await self.send_json({"type": "chat_joined", "chatId": chat.pk})

    async def _handle_send_message(self, request_id: int, content: str):
        """Append a message and fan it out to the chat and the recipient."""
        result = await database_sync_to_async(MessageService.send_message)(
            request_id=request_id,
            sender=self.user,
            content=content,
        )
        if not result.success:
            await self.send_error(result.error, result.error_code)
            return

        for group, event in RealtimeNotifier.message_events(result.data):
            await self.channel_layer.group_send(group, event)

    async def _handle_mark_as_read(self, chat_id: int):
        result = await database_sync_to_async(MessageService.mark_chat_as_read)(
            chat_id, self.user
        )
        if not result.success:
            await self.send_error(result.error, result.error_code)
            return
        await self.send_json(
            {"type": "messages_marked_read", "chatId": chat_id, "count": result.data}
        )

    async def _relay_typing(self, chat_id: int, event_type: str):
        """
        Relay a typing signal to the other connections in the chat room.

        Nothing is checked or stored: a chat id with no room behind it
        reaches nobody.
        """
        await self.channel_layer.group_send(
            chat_room(chat_id),
            {
                "type": event_type,
                "userId": self.user.id,
                "userName": self.session.user_name,
                "senderChannel": self.channel_name,
            },
        )

    # Channel layer event handlers

    async def chat_new_message(self, event):
        await self.send_json(
            {
                "type": "new_message",
                "chatId": event["chatId"],
                "message": event["message"],
            }
        )

    async def chat_message_notification(self, event):
        await self.send_json(
            {
                "type": "message_notification",
                "chatId": event["chatId"],
                "requestId": event["requestId"],
                "sender": event["sender"],
                "preview": event["preview"],
            }
        )

    async def chat_new_request(self, event):
        await self.send_json({"type": "new_request", "request": event["request"]})

    async def chat_user_typing(self, event):
        """Forward a typing signal, except to the connection that sent it."""
        if event["senderChannel"] == self.channel_name:
            return
        await self.send_json(
            {
                "type": "user_typing",
                "userId": event["userId"],
                "userName": event["userName"],
            }
        )

    async def chat_user_stop_typing(self, event):
        if event["senderChannel"] == self.channel_name:
            return
        await self.send_json({"type": "user_stop_typing", "userId": event["userId"]})
