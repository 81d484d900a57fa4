"""
URL configuration for chat API.

URL Structure:
    /                           GET  Caller's chats
    /{request_id}/messages/     GET  Message log of a request's chat

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
The websocket route lives in routing.py.
"""

from django.urls import path

from chat.views import ChatListView, ChatMessagesView

app_name = "chat"

urlpatterns = [
    path("", ChatListView.as_view(), name="chat-list"),
    path(
        "<int:request_id>/messages/",
        ChatMessagesView.as_view(),
        name="chat-messages",
    ),
]
