"""
Serializers for authentication models.

- UserSerializer: The authenticated user's own account
- UserSummarySerializer: Public display fields embedded in chat and
  transport payloads (camelCase keys, matching the websocket protocol)

Related files:
    - models.py: User model
    - chat/serializers.py, transport/serializers.py: Embed UserSummarySerializer
"""

from rest_framework import serializers

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """Read-only serializer for the authenticated user's account."""

    full_name = serializers.CharField(source="get_full_name", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "phone",
            "avatar",
            "role",
            "date_joined",
        ]
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """
    Public display fields for a user.

    Used for message senders, the counterpart of a chat, and the sender of
    a new transport request. Avatar is null when not set.
    """

    firstName = serializers.CharField(source="first_name", read_only=True)
    lastName = serializers.CharField(source="last_name", read_only=True)
    name = serializers.CharField(source="get_full_name", read_only=True)
    avatar = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "firstName", "lastName", "name", "avatar"]
        read_only_fields = fields

    def get_avatar(self, obj: User) -> str | None:
        return obj.avatar or None
