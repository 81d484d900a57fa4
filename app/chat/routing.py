"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/chat/ - Single chat gateway connection per client

Authentication:
    JWT token passed as ?token=<jwt_access_token>, as the "jwt, <token>"
    subprotocol, or as an Authorization: Bearer header. JWTAuthMiddleware
    validates it before the consumer runs.
"""

from django.urls import path

from chat import consumers
from chat.rooms import RoomRegistry


def build_websocket_urlpatterns(registry: RoomRegistry) -> list:
    """URL patterns whose consumers share the given room registry."""
    return [
        path(
            "ws/chat/",
            consumers.ChatConsumer.as_asgi(registry=registry),
        ),
    ]
