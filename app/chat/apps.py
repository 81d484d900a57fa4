"""
Chat application configuration.

This app provides the per-request chat with:
- One chat per transport request, between shipper and driver
- Realtime delivery over a Channels websocket
- Read tracking and typing indicators
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
