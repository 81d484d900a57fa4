"""
Constants and configuration for the request chat.

This module centralizes configuration values for:
- Message content limits and notification previews
- Typing indicator behaviour
- Websocket close codes used when a handshake is refused
- Chat provisioning and reconciliation

Import example:
    from chat.constants import CLOSE_CODES, MESSAGE_CONFIG
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    # Content limits, applied to the trimmed content
    MAX_CONTENT_LENGTH: Final[int] = 1000  # Characters
    MIN_CONTENT_LENGTH: Final[int] = 1

    # Notification preview sent to the other participant's personal room
    PREVIEW_LENGTH: Final[int] = 50
    PREVIEW_SUFFIX: Final[str] = "..."


# =============================================================================
# Typing Configuration
# =============================================================================


class TYPING_CONFIG:
    """
    Configuration for typing indicators.

    Typing signals are never stored. Clients drop a "user_typing" indicator
    when no new signal arrives within the expiry window.
    """

    CLIENT_EXPIRY_SECONDS: Final[int] = 3


# =============================================================================
# Connection Configuration
# =============================================================================


class CLOSE_CODES:
    """Websocket close codes sent after the error frame of a refused handshake."""

    CREDENTIAL_MISSING: Final[int] = 4001
    AUTHENTICATION_FAILED: Final[int] = 4002
    USER_NOT_AUTHORIZED: Final[int] = 4003


# =============================================================================
# Provisioning Configuration
# =============================================================================


class PROVISIONING_CONFIG:
    """Configuration for request chat provisioning."""

    # Requests handled per reconciliation run
    RECONCILE_BATCH_SIZE: Final[int] = 500

    # Beat schedule for chat.tasks.reconcile_request_chats
    RECONCILE_INTERVAL_MINUTES: Final[int] = 60
