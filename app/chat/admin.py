"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Chat overview (participants, activity, open/closed)
- Message moderation (read-only)
"""

from django.contrib import admin

from chat.models import Chat, ChatMessage


class ChatMessageInline(admin.TabularInline):
    """Inline display of messages in chat admin."""

    model = ChatMessage
    extra = 0
    can_delete = False
    fields = ["sender", "content", "timestamp", "read"]
    readonly_fields = fields
    raw_id_fields = ["sender"]

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    """Admin interface for Chat model."""

    list_display = [
        "id",
        "request",
        "requester",
        "driver",
        "is_active",
        "last_activity_at",
        "created_at",
    ]
    list_filter = ["is_active", "created_at"]
    search_fields = ["id", "requester__email", "driver__email"]
    readonly_fields = [
        "request",
        "requester",
        "driver",
        "last_activity_at",
        "created_at",
        "updated_at",
    ]
    inlines = [ChatMessageInline]


@admin.register(ChatMessage)
class ChatMessageAdmin(admin.ModelAdmin):
    """Admin interface for ChatMessage model."""

    list_display = ["id", "chat", "sender", "short_content", "read", "timestamp"]
    list_filter = ["read", "timestamp"]
    search_fields = ["content", "sender__email"]
    readonly_fields = ["chat", "sender", "content", "timestamp", "read"]
    raw_id_fields = ["chat", "sender"]

    @admin.display(description="Content")
    def short_content(self, obj):
        return obj.content[:50] + "..." if len(obj.content) > 50 else obj.content
