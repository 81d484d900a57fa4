"""
WebSocket authentication middleware.

Provides JWT authentication for chat websocket connections.

Related files:
    - routing.py: WebSocket URL patterns
    - consumers.py: Closes refused connections before accepting them
    - config/asgi.py: ASGI configuration

Token Passing Methods (in order of precedence):
    1. Query string: ws://host/ws/chat/?token=<jwt_token>
    2. Subprotocol: Sec-WebSocket-Protocol: jwt, <jwt_token>
    3. Header: Authorization: Bearer <jwt_token>

The middleware never closes the socket itself. It stores the outcome in
the scope and the consumer closes with the matching code:

    scope["user"]        User instance, or AnonymousUser when refused
    scope["auth_error"]  None, or the ConnectionAuthError raised

Usage in config/asgi.py:
    from chat.middleware import JWTAuthMiddlewareStack

    application = ProtocolTypeRouter({
        "websocket": JWTAuthMiddlewareStack(
            URLRouter(websocket_urlpatterns)
        ),
    })
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from core.exceptions import AuthenticationError

from chat.constants import CLOSE_CODES

logger = logging.getLogger(__name__)


class ConnectionAuthError(AuthenticationError):
    """Base class for refused websocket handshakes."""


class CredentialMissingError(ConnectionAuthError):
    default_error_code = "CREDENTIAL_MISSING"
    close_code = CLOSE_CODES.CREDENTIAL_MISSING


class AuthenticationFailedError(ConnectionAuthError):
    default_error_code = "AUTHENTICATION_FAILED"
    close_code = CLOSE_CODES.AUTHENTICATION_FAILED


class UserNotAuthorizedError(ConnectionAuthError):
    default_error_code = "USER_NOT_AUTHORIZED"
    close_code = CLOSE_CODES.USER_NOT_AUTHORIZED


def authenticate_token(token: str | None):
    """
    Resolve a JWT access token to an active user.

    Args:
        token: Raw access token, possibly None or blank

    Returns:
        The authenticated User

    Raises:
        CredentialMissingError: No token was presented
        AuthenticationFailedError: Bad signature, malformed or expired token
        UserNotAuthorizedError: User does not exist or is inactive
    """
    if not token or not token.strip():
        raise CredentialMissingError("credential missing")

    try:
        access_token = AccessToken(token.strip())
        user_id = access_token[api_settings.USER_ID_CLAIM]
    except (TokenError, KeyError) as e:
        raise AuthenticationFailedError("authentication failed") from e

    User = get_user_model()
    try:
        user = User.objects.get(**{api_settings.USER_ID_FIELD: user_id})
    except User.DoesNotExist as e:
        raise UserNotAuthorizedError("user not authorized") from e

    if not user.is_active:
        raise UserNotAuthorizedError("user not authorized")

    return user


class JWTAuthMiddleware(BaseMiddleware):
    """
    JWT authentication middleware for websocket connections.

    Extracts the token, authenticates it, and attaches the user and any
    authentication error to the scope before calling the inner app.
    """

    async def __call__(self, scope, receive, send):
        scope = dict(scope)
        token = (
            self._get_token_from_query(scope)
            or self._get_token_from_subprotocol(scope)
            or self._get_token_from_header(scope)
        )

        try:
            scope["user"] = await database_sync_to_async(authenticate_token)(token)
            scope["auth_error"] = None
        except ConnectionAuthError as e:
            logger.warning(f"Refused websocket handshake: {e}")
            scope["user"] = AnonymousUser()
            scope["auth_error"] = e

        return await super().__call__(scope, receive, send)

    @staticmethod
    def _get_token_from_query(scope) -> str | None:
        """Extract token from query string."""
        query_string = scope.get("query_string", b"").decode()
        token_list = parse_qs(query_string).get("token", [])
        return token_list[0] if token_list else None

    @staticmethod
    def _get_token_from_subprotocol(scope) -> str | None:
        """
        Extract token from websocket subprotocols.

        Expects: Sec-WebSocket-Protocol: jwt, <token>
        """
        subprotocols = scope.get("subprotocols") or []
        if len(subprotocols) >= 2 and subprotocols[0] == "jwt":
            return subprotocols[1]
        return None

    @staticmethod
    def _get_token_from_header(scope) -> str | None:
        """Extract token from an Authorization: Bearer header."""
        for name, value in scope.get("headers") or []:
            if name.lower() == b"authorization":
                scheme, _, credentials = value.decode().partition(" ")
                if scheme.lower() == "bearer" and credentials:
                    return credentials
        return None


def JWTAuthMiddlewareStack(inner):
    """Wrap an ASGI app in JWT authentication."""
    return JWTAuthMiddleware(inner)
