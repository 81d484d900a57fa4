"""
Serializers for the chat API and websocket payloads.

Keys are camelCase so the same representation is used for REST
responses and websocket frames.

Serializers:
    ChatMessageSerializer: A message with its sender's display fields
    ChatListSerializer: A chat in the caller's chat list

Design Decisions:
    - Read-only: messages are written through MessageService only
    - The list serializer reads annotations from ChatService.get_user_chats()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from chat.models import Chat, ChatMessage

if TYPE_CHECKING:
    from authentication.models import User


class ChatMessageSerializer(serializers.ModelSerializer):
    """
    A message as seen by participants.

    Example:
        {
            "id": 41,
            "chatId": 7,
            "sender": {"id": 3, "firstName": "Sofia", "lastName": "Martin",
                       "name": "Sofia Martin", "avatar": null},
            "content": "Bonjour, je confirme le colis",
            "timestamp": "2026-03-02T09:15:00Z",
            "read": false
        }
    """

    chatId = serializers.IntegerField(source="chat_id", read_only=True)
    sender = UserSummarySerializer(read_only=True)

    class Meta:
        model = ChatMessage
        fields = ["id", "chatId", "sender", "content", "timestamp", "read"]
        read_only_fields = fields


class ChatListSerializer(serializers.ModelSerializer):
    """
    Serializer for the chat list view.

    Expects the annotations added by ChatService.get_user_chats() and the
    requesting user in context["request"].
    """

    requestId = serializers.IntegerField(source="request_id", read_only=True)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    lastActivityAt = serializers.DateTimeField(
        source="last_activity_at", read_only=True
    )
    otherParticipant = serializers.SerializerMethodField(
        help_text="The participant who is not the caller"
    )
    lastMessage = serializers.SerializerMethodField(
        help_text="Most recent message preview"
    )
    unreadCount = serializers.IntegerField(source="unread_count", read_only=True)
    trip = serializers.SerializerMethodField()

    class Meta:
        model = Chat
        fields = [
            "id",
            "requestId",
            "isActive",
            "lastActivityAt",
            "otherParticipant",
            "lastMessage",
            "unreadCount",
            "trip",
        ]
        read_only_fields = fields

    def _current_user(self) -> User | None:
        request = self.context.get("request")
        return request.user if request else None

    def get_otherParticipant(self, obj: Chat) -> dict | None:
        user = self._current_user()
        if user is None:
            return None
        other = obj.driver if user.pk == obj.requester_id else obj.requester
        return UserSummarySerializer(other).data

    def get_lastMessage(self, obj: Chat) -> dict | None:
        content = getattr(obj, "last_message_content", None)
        if content is None:
            return None
        return {"content": content, "timestamp": obj.last_message_at}

    def get_trip(self, obj: Chat) -> dict:
        trip = obj.request.trip
        return {
            "id": trip.pk,
            "departureCity": trip.departure_city,
            "destinationCity": trip.destination_city,
            "departureDate": trip.departure_date,
        }
