"""
Tests for ChatConsumer over a real websocket stack.

Each test builds the same application as config.asgi (JWT middleware,
router, a fresh RoomRegistry) and drives it with WebsocketCommunicator.

Test Organization:
    - TestHandshake: Error frame and close code for refused connections
    - TestJoin: join_chats and join_chat
    - TestSendMessage: Append and fan-out
    - TestTyping: Typing relay
    - TestMarkAsRead: Read-state updates
    - TestInvalidEvents: Malformed frames
    - TestRequestToConversation: Full shipper/driver flow
"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from channels.db import database_sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.db import DatabaseError

from chat.middleware import JWTAuthMiddleware
from chat.models import ChatMessage
from chat.rooms import RoomRegistry
from chat.routing import build_websocket_urlpatterns
from chat.tests.factories import ChatFactory, ChatMessageFactory
from transport.services import TransportRequestService
from transport.tests.factories import TransportRequestFactory

pytestmark = [pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def connect(registry, make_token):
    """
    Open an authenticated websocket for a user.

    Usage:
        communicator = await connect(user)
    """
    application = JWTAuthMiddleware(URLRouter(build_websocket_urlpatterns(registry)))

    async def _connect(user):
        communicator = WebsocketCommunicator(
            application, f"/ws/chat/?token={make_token(user)}"
        )
        connected, _ = await communicator.connect()
        assert connected
        return communicator

    _connect.application = application
    return _connect


async def next_of_type(communicator, event_type, timeout=1):
    """Receive frames until one of the given type arrives."""
    while True:
        frame = await communicator.receive_json_from(timeout=timeout)
        if frame["type"] == event_type:
            return frame


async def refusal(communicator):
    """Connect, then collect the error frame and the close that follow."""
    connected, _ = await communicator.connect()
    assert connected is True
    frame = await communicator.receive_json_from()
    closed = await communicator.receive_output()
    await communicator.disconnect()
    return frame, closed


# =============================================================================
# Handshake
# =============================================================================


class TestHandshake:
    async def test_missing_token_closes_4001(self, connect):
        """
        Given a handshake without any token
        When the connection is opened
        Then an error frame explains why before the socket closes with 4001
        """
        communicator = WebsocketCommunicator(connect.application, "/ws/chat/")

        frame, closed = await refusal(communicator)

        assert frame == {
            "type": "error",
            "message": "credential missing",
            "code": "CREDENTIAL_MISSING",
        }
        assert closed["type"] == "websocket.close"
        assert closed["code"] == 4001

    async def test_bad_token_closes_4002(self, connect):
        communicator = WebsocketCommunicator(
            connect.application, "/ws/chat/?token=not-a-jwt"
        )

        frame, closed = await refusal(communicator)

        assert frame["code"] == "AUTHENTICATION_FAILED"
        assert frame["message"] == "authentication failed"
        assert closed["type"] == "websocket.close"
        assert closed["code"] == 4002

    async def test_inactive_user_closes_4003(self, connect, shipper, make_token):
        token = make_token(shipper)
        shipper.is_active = False
        await database_sync_to_async(shipper.save)(update_fields=["is_active"])
        communicator = WebsocketCommunicator(
            connect.application, f"/ws/chat/?token={token}"
        )

        frame, closed = await refusal(communicator)

        assert frame["code"] == "USER_NOT_AUTHORIZED"
        assert frame["message"] == "user not authorized"
        assert closed["type"] == "websocket.close"
        assert closed["code"] == 4003

    async def test_subprotocol_token_accepted(self, connect, shipper, make_token):
        communicator = WebsocketCommunicator(
            connect.application,
            "/ws/chat/",
            subprotocols=["jwt", make_token(shipper)],
        )

        connected, subprotocol = await communicator.connect()

        assert connected is True
        assert subprotocol == "jwt"
        await communicator.disconnect()

    async def test_connection_joins_personal_room(self, connect, registry, shipper):
        communicator = await connect(shipper)

        assert registry.session_count() == 1
        assert len(registry.members(f"user_{shipper.id}")) == 1

        await communicator.disconnect()
        assert registry.session_count() == 0
        assert registry.members(f"user_{shipper.id}") == set()


# =============================================================================
# Join
# =============================================================================


class TestJoin:
    async def test_join_chats_is_idempotent(self, connect, registry, chat, shipper):
        """
        Given a user with one active chat
        When join_chats is sent twice
        Then the connection sits in the room once and both replies agree
        """
        communicator = await connect(shipper)

        await communicator.send_json_to({"type": "join_chats"})
        first = await communicator.receive_json_from()
        await communicator.send_json_to({"type": "join_chats"})
        second = await communicator.receive_json_from()

        assert first == second == {"type": "chats_joined", "count": 1}
        assert len(registry.members(f"chat_{chat.id}")) == 1
        await communicator.disconnect()

    async def test_join_chat_marks_incoming_as_read(
        self, connect, chat, shipper, driver
    ):
        """
        Why it matters: opening a chat is how a participant acknowledges
        what the other side wrote, while their own messages stay unread.
        """
        incoming = await database_sync_to_async(ChatMessageFactory)(
            chat=chat, sender=shipper
        )
        outgoing = await database_sync_to_async(ChatMessageFactory)(
            chat=chat, sender=driver
        )
        communicator = await connect(driver)

        await communicator.send_json_to(
            {"type": "join_chat", "requestId": chat.request_id}
        )
        response = await communicator.receive_json_from()

        assert response == {"type": "chat_joined", "chatId": chat.id}
        await database_sync_to_async(incoming.refresh_from_db)()
        await database_sync_to_async(outgoing.refresh_from_db)()
        assert incoming.read is True
        assert outgoing.read is False
        await communicator.disconnect()

    async def test_outsider_cannot_join(self, connect, registry, chat, outsider):
        communicator = await connect(outsider)

        await communicator.send_json_to(
            {"type": "join_chat", "requestId": chat.request_id}
        )
        response = await communicator.receive_json_from()

        assert response == {
            "type": "error",
            "message": "channel not found or access denied",
            "code": "CHAT_NOT_FOUND",
        }
        assert registry.members(f"chat_{chat.id}") == set()
        await communicator.disconnect()


# =============================================================================
# Send Message
# =============================================================================


class TestSendMessage:
    async def test_message_fanned_out(self, connect, chat, shipper, driver):
        """
        Given both participants connected and the driver in the chat room
        When the shipper sends a message
        Then the driver gets new_message and a message_notification
        """
        driver_ws = await connect(driver)
        await driver_ws.send_json_to({"type": "join_chats"})
        await driver_ws.receive_json_from()
        shipper_ws = await connect(shipper)

        await shipper_ws.send_json_to(
            {"type": "send_message", "requestId": chat.request_id, "content": " Salut "}
        )

        new_message = await next_of_type(driver_ws, "new_message")
        assert new_message["chatId"] == chat.id
        assert new_message["message"]["content"] == "Salut"
        assert new_message["message"]["sender"]["id"] == shipper.id
        assert new_message["message"]["read"] is False

        notification = await next_of_type(driver_ws, "message_notification")
        assert notification["requestId"] == chat.request_id
        assert notification["sender"] == {"id": shipper.id, "name": "Sofia Martin"}
        assert notification["preview"] == "Salut"

        await shipper_ws.disconnect()
        await driver_ws.disconnect()

    async def test_sender_in_room_receives_own_message(self, connect, chat, shipper):
        communicator = await connect(shipper)
        await communicator.send_json_to(
            {"type": "join_chat", "requestId": chat.request_id}
        )
        await communicator.receive_json_from()

        await communicator.send_json_to(
            {"type": "send_message", "requestId": chat.request_id, "content": "Ok"}
        )

        frame = await communicator.receive_json_from()
        assert frame["type"] == "new_message"
        assert frame["message"]["content"] == "Ok"
        await communicator.disconnect()

    async def test_validation_error_goes_to_sender_only(
        self, connect, chat, shipper, driver
    ):
        driver_ws = await connect(driver)
        await driver_ws.send_json_to({"type": "join_chats"})
        await driver_ws.receive_json_from()
        shipper_ws = await connect(shipper)

        await shipper_ws.send_json_to(
            {"type": "send_message", "requestId": chat.request_id, "content": "   "}
        )

        error = await shipper_ws.receive_json_from()
        assert error["code"] == "EMPTY_CONTENT"
        assert await driver_ws.receive_nothing()
        assert await database_sync_to_async(ChatMessage.objects.count)() == 0

        await shipper_ws.disconnect()
        await driver_ws.disconnect()

    async def test_outsider_cannot_send(self, connect, chat, outsider):
        communicator = await connect(outsider)

        await communicator.send_json_to(
            {"type": "send_message", "requestId": chat.request_id, "content": "Hi"}
        )

        error = await communicator.receive_json_from()
        assert error["code"] == "CHAT_NOT_FOUND"
        assert await database_sync_to_async(ChatMessage.objects.count)() == 0
        await communicator.disconnect()

    async def test_database_error_reported_generically(self, connect, chat, shipper):
        communicator = await connect(shipper)

        with patch(
            "chat.consumers.MessageService.send_message",
            side_effect=DatabaseError("connection lost"),
        ):
            await communicator.send_json_to(
                {"type": "send_message", "requestId": chat.request_id, "content": "x"}
            )
            error = await communicator.receive_json_from()

        assert error == {
            "type": "error",
            "message": "operation failed",
            "code": "OPERATION_FAILED",
        }
        await communicator.disconnect()


# =============================================================================
# Typing
# =============================================================================


class TestTyping:
    async def test_typing_relayed_to_others_only(self, connect, chat, shipper, driver):
        shipper_ws = await connect(shipper)
        driver_ws = await connect(driver)
        for ws in (shipper_ws, driver_ws):
            await ws.send_json_to({"type": "join_chats"})
            await ws.receive_json_from()

        await shipper_ws.send_json_to({"type": "typing", "chatId": chat.id})

        assert await driver_ws.receive_json_from() == {
            "type": "user_typing",
            "userId": shipper.id,
            "userName": "Sofia Martin",
        }
        assert await shipper_ws.receive_nothing()

        await shipper_ws.send_json_to({"type": "stop_typing", "chatId": chat.id})
        assert await driver_ws.receive_json_from() == {
            "type": "user_stop_typing",
            "userId": shipper.id,
        }

        await shipper_ws.disconnect()
        await driver_ws.disconnect()

    async def test_typing_without_join_reaches_room(
        self, connect, chat, shipper, driver
    ):
        """
        Given a driver who joined the chat room
        When the shipper types in that chat without joining it first
        Then the driver still sees the indicator
        """
        driver_ws = await connect(driver)
        await driver_ws.send_json_to({"type": "join_chats"})
        await driver_ws.receive_json_from()
        shipper_ws = await connect(shipper)

        await shipper_ws.send_json_to({"type": "typing", "chatId": chat.id})

        assert await driver_ws.receive_json_from() == {
            "type": "user_typing",
            "userId": shipper.id,
            "userName": "Sofia Martin",
        }
        assert await shipper_ws.receive_nothing()
        await shipper_ws.disconnect()
        await driver_ws.disconnect()

    async def test_typing_to_unknown_chat_is_noop(self, connect, chat, shipper, driver):
        driver_ws = await connect(driver)
        await driver_ws.send_json_to({"type": "join_chats"})
        await driver_ws.receive_json_from()
        shipper_ws = await connect(shipper)

        await shipper_ws.send_json_to({"type": "typing", "chatId": 999999})

        assert await driver_ws.receive_nothing()
        assert await shipper_ws.receive_nothing()
        await shipper_ws.disconnect()
        await driver_ws.disconnect()

    async def test_malformed_typing_is_silent(self, connect, shipper):
        communicator = await connect(shipper)

        await communicator.send_json_to({"type": "typing", "chatId": "abc"})

        assert await communicator.receive_nothing()
        await communicator.disconnect()


# =============================================================================
# Mark As Read
# =============================================================================


class TestMarkAsRead:
    async def test_mark_as_read_reports_count(self, connect, chat, shipper, driver):
        await database_sync_to_async(ChatMessageFactory.create_batch)(
            2, chat=chat, sender=shipper
        )
        communicator = await connect(driver)

        await communicator.send_json_to({"type": "mark_as_read", "chatId": chat.id})

        assert await communicator.receive_json_from() == {
            "type": "messages_marked_read",
            "chatId": chat.id,
            "count": 2,
        }
        await communicator.disconnect()

    async def test_outsider_gets_not_found(self, connect, chat, outsider):
        communicator = await connect(outsider)

        await communicator.send_json_to({"type": "mark_as_read", "chatId": chat.id})

        error = await communicator.receive_json_from()
        assert error["code"] == "CHAT_NOT_FOUND"
        await communicator.disconnect()


# =============================================================================
# Invalid Events
# =============================================================================


class TestInvalidEvents:
    async def test_unknown_type(self, connect, shipper):
        communicator = await connect(shipper)

        await communicator.send_json_to({"type": "delete_everything"})

        error = await communicator.receive_json_from()
        assert error["type"] == "error"
        assert error["code"] == "INVALID_EVENT"
        await communicator.disconnect()

    async def test_undecodable_frame(self, connect, shipper):
        communicator = await connect(shipper)

        await communicator.send_to(text_data="{not json")

        error = await communicator.receive_json_from()
        assert error["code"] == "INVALID_EVENT"
        await communicator.disconnect()

    async def test_non_ascii_digit_id_rejected(self, connect, chat, shipper):
        """
        Given a join_chat whose requestId is a superscript digit
        When the frame is handled
        Then the sender gets INVALID_EVENT and the connection stays usable
        """
        communicator = await connect(shipper)

        await communicator.send_json_to({"type": "join_chat", "requestId": "²"})

        error = await communicator.receive_json_from()
        assert error["type"] == "error"
        assert error["code"] == "INVALID_EVENT"

        await communicator.send_json_to({"type": "join_chats"})
        assert await communicator.receive_json_from() == {
            "type": "chats_joined",
            "count": 1,
        }
        await communicator.disconnect()

    async def test_connection_survives_errors(self, connect, chat, shipper):
        communicator = await connect(shipper)
        await communicator.send_json_to({"type": "join_chat"})
        await communicator.receive_json_from()

        await communicator.send_json_to({"type": "join_chats"})

        assert await communicator.receive_json_from() == {
            "type": "chats_joined",
            "count": 1,
        }
        await communicator.disconnect()


# =============================================================================
# End to End
# =============================================================================


class TestRequestToConversation:
    async def test_shipper_and_driver_flow(self, connect, trip, shipper, driver):
        """
        Given a driver connected to the gateway
        When a shipper creates a request on the driver's trip and writes
        Then the driver is told about the request, receives the message,
        and marking the chat as read is persisted
        """
        driver_ws = await connect(driver)

        result = await database_sync_to_async(TransportRequestService.create_request)(
            sender=shipper,
            trip_id=trip.id,
            weight_kg=Decimal("12.50"),
            pickup_address="12 rue de la Paix, Paris",
            delivery_address="3 place Bellecour, Lyon",
        )
        assert result.success is True
        transport_request = result.data
        chat = transport_request.chat
        assert chat.participant_ids == (shipper.id, driver.id)

        new_request = await next_of_type(driver_ws, "new_request")
        assert new_request["request"]["id"] == transport_request.id
        assert new_request["request"]["chatId"] == chat.id

        await driver_ws.send_json_to({"type": "join_chats"})
        assert await driver_ws.receive_json_from() == {
            "type": "chats_joined",
            "count": 1,
        }

        shipper_ws = await connect(shipper)
        await shipper_ws.send_json_to(
            {"type": "join_chat", "requestId": transport_request.id}
        )
        assert (await shipper_ws.receive_json_from())["type"] == "chat_joined"
        await shipper_ws.send_json_to(
            {
                "type": "send_message",
                "requestId": transport_request.id,
                "content": "Bonjour, je confirme le colis",
            }
        )

        new_message = await next_of_type(driver_ws, "new_message")
        assert new_message["message"]["content"] == "Bonjour, je confirme le colis"
        assert new_message["message"]["sender"]["id"] == shipper.id

        await driver_ws.send_json_to({"type": "mark_as_read", "chatId": chat.id})
        marked = await next_of_type(driver_ws, "messages_marked_read")
        assert marked["count"] == 1

        message = await database_sync_to_async(
            ChatMessage.objects.get
        )(id=new_message["message"]["id"])
        assert message.read is True

        await shipper_ws.disconnect()
        await driver_ws.disconnect()

    async def test_second_request_gets_its_own_chat(self, trip, shipper):
        first = await database_sync_to_async(ChatFactory)(
            request=await database_sync_to_async(TransportRequestFactory)(
                trip=trip, sender=shipper
            )
        )
        result = await database_sync_to_async(TransportRequestService.create_request)(
            sender=shipper,
            trip_id=trip.id,
            weight_kg=Decimal("1.00"),
            pickup_address="a",
            delivery_address="b",
        )

        assert result.data.chat.id != first.id
