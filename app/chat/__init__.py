"""
Chat app for real-time messaging between a shipper and a driver.

This app handles:
- One chat per transport request, created with the request
- Message sending and history
- WebSocket real-time updates (new messages, notifications, new requests)
- Read state and typing indicators

Related apps:
    - authentication: Users taking part in chats
    - transport: Requests that own the chats

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for WebSocket handlers.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.services import MessageService

    result = MessageService.send_message(
        request_id=transport_request.id,
        sender=user,
        content="Hello!",
    )
"""
