"""
Chat models.

Every transport request owns exactly one chat between the shipper who sent
it and the driver of the trip. The chat is created with the request and
lives as long as it does.

Models:
    Chat: The conversation attached to one transport request
    ChatMessage: A message inside a chat, in append order

Design Decisions:
    - Exactly two participants, fixed at creation (requester and driver)
    - Messages are append-only: no editing, no deletion
    - Message order is insertion order (id), never re-sorted by timestamp
    - Closing a chat (is_active=False) stops new messages but keeps history
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from core.models import BaseModel

from chat.constants import MESSAGE_CONFIG

if TYPE_CHECKING:
    from authentication.models import User


class Chat(BaseModel):
    """
    The chat channel attached to a transport request.

    Fields:
        request: The transport request this chat belongs to (unique)
        requester: Shipper who sent the request
        driver: Driver of the trip when the request was created
        last_activity_at: Time of the most recent message or channel event
        is_active: False closes the chat for new messages

    Constraints:
        - One chat per request (OneToOne, enforced by the database)
        - requester and driver are different users
        - Participants never change after creation
    """

    request = models.OneToOneField(
        "transport.TransportRequest",
        on_delete=models.CASCADE,
        related_name="chat",
        help_text="Transport request this chat belongs to",
    )
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="requester_chats",
        help_text="Shipper who sent the request",
    )
    driver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="driver_chats",
        help_text="Driver of the trip",
    )
    last_activity_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="Timestamp of the most recent message or channel event",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive chats stay readable but refuse new messages",
    )

    class Meta:
        db_table = "chat_chat"
        ordering = ["-last_activity_at"]
        constraints = [
            models.CheckConstraint(
                condition=~Q(requester=F("driver")),
                name="chat_participants_distinct",
            ),
        ]
        indexes = [
            models.Index(
                fields=["requester", "-last_activity_at"],
                name="chat_requester_activity_idx",
            ),
            models.Index(
                fields=["driver", "-last_activity_at"],
                name="chat_driver_activity_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"Chat {self.pk} for request {self.request_id}"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_participant_ids = (
            instance.__dict__.get("requester_id"),
            instance.__dict__.get("driver_id"),
        )
        return instance

    def save(self, *args, **kwargs):
        """Save the chat, refusing to reassign participants of an existing row."""
        loaded = getattr(self, "_loaded_participant_ids", None)
        if loaded is not None and None not in loaded:
            if loaded != (self.requester_id, self.driver_id):
                raise ValueError("Chat participants cannot be changed")
        super().save(*args, **kwargs)

    @property
    def participants(self) -> list[User]:
        """The two participants, requester first."""
        return [self.requester, self.driver]

    @property
    def participant_ids(self) -> tuple[int, int]:
        return (self.requester_id, self.driver_id)

    def is_participant(self, user: User) -> bool:
        """Check whether the user is one of the two participants."""
        return user is not None and user.pk in self.participant_ids

    def get_other_participant_id(self, user: User) -> int | None:
        """
        Get the id of the participant who is not the given user.

        Returns None if the user is not a participant.
        """
        if user.pk == self.requester_id:
            return self.driver_id
        if user.pk == self.driver_id:
            return self.requester_id
        return None


class ChatMessage(models.Model):
    """
    A message within a chat.

    Messages are only ever appended. The read flag is set by the other
    participant's read-state update and never goes back to False.

    Fields:
        chat: Chat this message belongs to
        sender: Participant who authored the message
        content: Trimmed message text, 1 to 1000 characters
        timestamp: Append time
        read: Whether the other participant has acknowledged the message
    """

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Chat this message belongs to",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_messages",
        help_text="Participant who sent this message",
    )
    content = models.TextField(
        max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH,
        help_text="Message text",
    )
    timestamp = models.DateTimeField(
        default=timezone.now,
        help_text="When the message was appended",
    )
    read = models.BooleanField(
        default=False,
        help_text="Whether the recipient has read this message",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["id"]
        indexes = [
            # Unread messages per chat, used by read-state updates and counts
            models.Index(
                fields=["chat", "read", "sender"],
                name="chat_msg_unread_idx",
            ),
        ]

    def __str__(self) -> str:
        content_preview = (
            self.content[:50] + "..." if len(self.content) > 50 else self.content
        )
        return f"User {self.sender_id}: {content_preview}"
