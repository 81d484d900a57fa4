"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Chat and ChatMessage model tests
- test_services.py: Lookup, message, provisioning and notifier services
- test_protocol.py: Inbound websocket event parsing
- test_rooms.py: RoomRegistry membership
- test_middleware.py: Websocket JWT authentication
- test_consumers.py: WebSocket consumer tests
- test_tasks.py: Reconciliation task
- test_views.py: REST API endpoint tests

Usage:
    pytest chat/tests/
    pytest chat/tests/test_consumers.py
"""
