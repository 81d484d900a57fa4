"""
Chat service layer.

This module provides the business logic of the request chat, shared by the
websocket consumer, the REST views and the Celery tasks.

Services:
    ChatService: Chat lookups scoped to a participant
    MessageService: Message append and read-state updates
    ChatProvisioningService: One chat per transport request
    RealtimeNotifier: Channel layer events for rooms

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure()
    - Unexpected failures (database errors) raise
    - Lookups never reveal whether a chat exists to a non-participant

Usage:
    from chat.services import MessageService

    result = MessageService.send_message(
        request_id=request.id,
        sender=user,
        content="Bonjour, je confirme le colis",
    )
    if result.success:
        message = result.data
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import IntegrityError, transaction
from django.db.models import Count, F, OuterRef, Q, QuerySet, Subquery
from django.utils import timezone

from core.exceptions import ConflictError
from core.services import BaseService, ServiceResult

from chat.constants import MESSAGE_CONFIG, PROVISIONING_CONFIG
from chat.models import Chat, ChatMessage
from chat.rooms import chat_room, user_room
from chat.serializers import ChatMessageSerializer

if TYPE_CHECKING:
    from authentication.models import User
    from transport.models import TransportRequest

logger = logging.getLogger(__name__)


class ChatProvisioningError(ConflictError):
    """Raised when a chat cannot be created for a request (duplicate)."""

    default_error_code = "CHAT_PROVISIONING_FAILED"


class ChatService(BaseService):
    """
    Service for chat lookups.

    Methods:
        get_active_chat_ids: Ids of the user's open chats
        get_chat_for_request: The chat of a request, for a participant only
        get_chat_for_participant: A chat by id, for a participant only
        get_user_chats: The user's chats with preview and unread count
        get_messages: Full message log of a chat
    """

    @staticmethod
    def _participant_filter(user: User) -> Q:
        return Q(requester=user) | Q(driver=user)

    @classmethod
    def get_active_chat_ids(cls, user: User) -> list[int]:
        """Ids of every active chat the user participates in."""
        return list(
            Chat.objects.filter(cls._participant_filter(user), is_active=True)
            .order_by("id")
            .values_list("id", flat=True)
        )

    @classmethod
    def get_chat_for_request(cls, request_id: int, user: User) -> Chat | None:
        """
        Get the chat of a transport request.

        Returns:
            The chat, or None if it does not exist or the user is not
            one of its participants
        """
        return (
            Chat.objects.select_related("requester", "driver")
            .filter(cls._participant_filter(user), request_id=request_id)
            .first()
        )

    @classmethod
    def get_chat_for_participant(cls, chat_id: int, user: User) -> Chat | None:
        """Get a chat by id, or None if missing or the user is not a participant."""
        return (
            Chat.objects.select_related("requester", "driver")
            .filter(cls._participant_filter(user), pk=chat_id)
            .first()
        )

    @classmethod
    def get_user_chats(cls, user: User) -> QuerySet[Chat]:
        """
        Get the user's chats, most recent activity first.

        Each chat is annotated with:
            unread_count: Unread messages sent by the other participant
            last_message_content: Content of the latest message (or None)
            last_message_at: Timestamp of the latest message (or None)
        """
        latest = ChatMessage.objects.filter(chat=OuterRef("pk")).order_by("-id")
        return (
            Chat.objects.filter(cls._participant_filter(user))
            .select_related("requester", "driver", "request", "request__trip")
            .annotate(
                unread_count=Count(
                    "messages",
                    filter=Q(messages__read=False) & ~Q(messages__sender=user),
                ),
                last_message_content=Subquery(latest.values("content")[:1]),
                last_message_at=Subquery(latest.values("timestamp")[:1]),
            )
            .order_by("-last_activity_at", "-id")
        )

    @classmethod
    def get_messages(cls, chat: Chat) -> QuerySet[ChatMessage]:
        """Full message log of a chat, in append order."""
        return chat.messages.select_related("sender").order_by("id")


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        send_message: Validate and append a message
        mark_as_read: Mark the other participant's messages as read
        mark_chat_as_read: Same, for a chat id after a participation check
        build_preview: Shortened content for notifications
    """

    @classmethod
    def send_message(
        cls,
        request_id: int,
        sender: User,
        content: str,
    ) -> ServiceResult[ChatMessage]:
        """
        Append a message to the chat of a transport request.

        Checks run in order and the first failure is returned.

        Args:
            request_id: Transport request whose chat receives the message
            sender: Authenticated user sending the message
            content: Raw message text (trimmed before validation and storage)

        Returns:
            ServiceResult with the new ChatMessage, sender loaded

        Error codes:
            EMPTY_CONTENT: Nothing left after trimming
            CONTENT_TOO_LONG: More than MESSAGE_CONFIG.MAX_CONTENT_LENGTH characters
            CHAT_NOT_FOUND: No chat for the request, or sender not a participant
            CHAT_CLOSED: The chat no longer accepts messages
        """
        content = content.strip() if content else ""
        if len(content) < MESSAGE_CONFIG.MIN_CONTENT_LENGTH:
            return ServiceResult.failure(
                "message cannot be empty",
                error_code="EMPTY_CONTENT",
            )

        if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            return ServiceResult.failure(
                "message too long",
                error_code="CONTENT_TOO_LONG",
            )

        chat = ChatService.get_chat_for_request(request_id, sender)
        if chat is None:
            cls.get_logger().warning(
                f"User {sender.id} denied sending to request {request_id}"
            )
            return ServiceResult.failure(
                "channel not found or access denied",
                error_code="CHAT_NOT_FOUND",
            )

        if not chat.is_active:
            return ServiceResult.failure(
                "channel is closed",
                error_code="CHAT_CLOSED",
            )

        now = timezone.now()
        with cls.atomic():
            message = ChatMessage.objects.create(
                chat=chat,
                sender=sender,
                content=content,
                timestamp=now,
                read=False,
            )
            Chat.objects.filter(pk=chat.pk).update(last_activity_at=now, updated_at=now)

        # Sender display fields are needed for fan-out
        message = ChatMessage.objects.select_related("sender", "chat").get(
            pk=message.pk
        )

        cls.get_logger().debug(
            f"User {sender.id} sent message {message.id} to chat {chat.id}"
        )
        return ServiceResult.success(message)

    @classmethod
    def mark_as_read(cls, chat: Chat, user: User) -> int:
        """
        Mark every unread message of the other participant as read.

        Single conditional UPDATE. Messages authored by the user and
        messages already read are left untouched.

        Returns:
            Number of messages that changed to read
        """
        count = (
            ChatMessage.objects.filter(chat=chat, read=False)
            .exclude(sender=user)
            .update(read=True)
        )
        if count:
            cls.get_logger().debug(
                f"User {user.id} read {count} messages in chat {chat.pk}"
            )
        return count

    @classmethod
    def mark_chat_as_read(cls, chat_id: int, user: User) -> ServiceResult[int]:
        """
        Mark a chat as read after checking participation.

        Error codes:
            CHAT_NOT_FOUND: Missing chat or user not a participant
        """
        chat = ChatService.get_chat_for_participant(chat_id, user)
        if chat is None:
            return ServiceResult.failure(
                "channel not found or access denied",
                error_code="CHAT_NOT_FOUND",
            )
        return ServiceResult.success(cls.mark_as_read(chat, user))

    @staticmethod
    def build_preview(content: str) -> str:
        """First characters of a message, with a suffix when cut."""
        limit = MESSAGE_CONFIG.PREVIEW_LENGTH
        if len(content) <= limit:
            return content
        return content[:limit] + MESSAGE_CONFIG.PREVIEW_SUFFIX


class ChatProvisioningService(BaseService):
    """
    Service creating the chat of each transport request.

    Methods:
        provision_for_request: Create the chat of a new request
        reconcile_missing_chats: Create chats for requests that lack one
    """

    @classmethod
    def provision_for_request(cls, transport_request: TransportRequest) -> Chat:
        """
        Create the chat between the request's sender and the trip's driver.

        Meant to run inside the transaction that inserts the request, so
        both rows commit together. The insert runs in a savepoint so a
        conflict leaves the outer transaction usable.

        Raises:
            ChatProvisioningError: The request already has a chat, or the
                participants are the same user
            DatabaseError: Any other database failure
        """
        trip = transport_request.trip
        if transport_request.sender_id == trip.driver_id:
            raise ChatProvisioningError(
                "Requester and driver must be different users",
                error_code="CHAT_PARTICIPANTS_INVALID",
                details={"request_id": transport_request.pk},
            )

        try:
            with transaction.atomic():
                chat = Chat.objects.create(
                    request=transport_request,
                    requester_id=transport_request.sender_id,
                    driver_id=trip.driver_id,
                    is_active=True,
                    last_activity_at=timezone.now(),
                )
        except IntegrityError as e:
            cls.get_logger().warning(
                f"Chat provisioning conflict for request {transport_request.pk}: {e}"
            )
            raise ChatProvisioningError(
                "A chat already exists for this request",
                error_code="CHAT_ALREADY_EXISTS",
                details={"request_id": transport_request.pk},
            ) from e

        cls.get_logger().info(
            f"Provisioned chat {chat.pk} for request {transport_request.pk}"
        )
        return chat

    @classmethod
    def reconcile_missing_chats(
        cls, batch_size: int = PROVISIONING_CONFIG.RECONCILE_BATCH_SIZE
    ) -> int:
        """
        Create the chat of every request that does not have one.

        Requests whose sender is also the trip's driver cannot have a valid
        chat and are left out of the query, so they never fill a batch.
        Safe to run repeatedly.

        Returns:
            Number of chats created
        """
        from transport.models import TransportRequest

        orphans = (
            TransportRequest.objects.filter(chat__isnull=True)
            .exclude(sender=F("trip__driver"))
            .select_related("trip")
            .order_by("id")[:batch_size]
        )

        created = 0
        for transport_request in orphans:
            try:
                cls.provision_for_request(transport_request)
            except ChatProvisioningError:
                # Created concurrently since the query ran
                continue
            created += 1

        if created:
            cls.get_logger().info(f"Reconciliation created {created} chats")
        return created


class RealtimeNotifier:
    """
    Builds and sends channel layer events for chat rooms.

    Event "type" values map to ChatConsumer handler methods
    ("chat.new_message" -> chat_new_message).
    """

    @staticmethod
    def serialize_message(message: ChatMessage) -> dict[str, Any]:
        return dict(ChatMessageSerializer(message).data)

    @classmethod
    def message_events(
        cls, message: ChatMessage
    ) -> list[tuple[str, dict[str, Any]]]:
        """
        Events announcing a new message.

        Returns:
            (group, event) pairs: new_message for the chat room, then a
            message_notification for the other participant's personal room
        """
        chat = message.chat
        sender = message.sender
        events = [
            (
                chat_room(chat.pk),
                {
                    "type": "chat.new_message",
                    "chatId": chat.pk,
                    "message": cls.serialize_message(message),
                },
            )
        ]
        other_id = chat.get_other_participant_id(sender)
        if other_id is not None:
            events.append(
                (
                    user_room(other_id),
                    {
                        "type": "chat.message_notification",
                        "chatId": chat.pk,
                        "requestId": chat.request_id,
                        "sender": {"id": sender.pk, "name": sender.get_full_name()},
                        "preview": MessageService.build_preview(message.content),
                    },
                )
            )
        return events

    @staticmethod
    def new_request(driver_id: int, request_summary: dict[str, Any]) -> None:
        """
        Tell a driver about a request on one of their trips.

        Called from synchronous code after the request transaction commits.
        """
        channel_layer = get_channel_layer()
        if channel_layer is None:
            logger.warning(
                f"No channel layer configured, new_request for driver {driver_id} dropped"
            )
            return
        async_to_sync(channel_layer.group_send)(
            user_room(driver_id),
            {"type": "chat.new_request", "request": request_summary},
        )
