"""
ASGI config for the Django application.

This file exposes the ASGI callable as a module-level variable named
`application`.

This configuration supports:
- HTTP requests via Django
- WebSocket connections via Django Channels (the chat gateway at ws/chat/)

One RoomRegistry is built per server process and shared by every chat
consumer of that process. Fan-out across processes goes through the
channel layer.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/asgi/
"""

import os

from django.core.asgi import get_asgi_application

# Set the default Django settings module for the ASGI application
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

# Initialize Django ASGI application early to ensure settings are loaded
# before importing any models or other Django components
django_asgi_app = get_asgi_application()

# Import Channels components after Django is initialized
from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from channels.security.websocket import AllowedHostsOriginValidator  # noqa: E402

from chat.middleware import JWTAuthMiddlewareStack  # noqa: E402
from chat.rooms import RoomRegistry  # noqa: E402
from chat.routing import build_websocket_urlpatterns  # noqa: E402

room_registry = RoomRegistry()

# ASGI application that routes HTTP and WebSocket protocols
application = ProtocolTypeRouter(
    {
        # HTTP requests are handled by Django's ASGI application
        "http": django_asgi_app,
        # WebSocket connections are routed through:
        # 1. AllowedHostsOriginValidator - ensures origin matches ALLOWED_HOSTS
        # 2. JWTAuthMiddlewareStack - resolves the JWT into scope["user"]
        # 3. URLRouter - routes to the chat consumer
        "websocket": AllowedHostsOriginValidator(
            JWTAuthMiddlewareStack(
                URLRouter(build_websocket_urlpatterns(room_registry))
            )
        ),
    }
)
