"""
Authentication application.

Owns the marketplace user (drivers, shippers, admins) and the JWT endpoints
used by both the REST API and the chat websocket handshake.

Key components:
    - User model: Email-based user with display fields used by chat fan-out
    - UserSummarySerializer: Public display fields (name, avatar)
    - Token endpoints: simplejwt obtain/refresh

Usage:
    from authentication.models import User, UserRole
"""
