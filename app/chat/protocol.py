"""
Inbound websocket protocol for the chat gateway.

Client frames are JSON objects with a "type" key. parse_event() turns a
frame into one of a closed set of immutable event objects, which the
consumer dispatches with a match statement.

    {"type": "join_chats"}
    {"type": "join_chat", "requestId": 12}
    {"type": "send_message", "requestId": 12, "content": "Bonjour"}
    {"type": "mark_as_read", "chatId": 7}
    {"type": "typing", "chatId": 7}
    {"type": "stop_typing", "chatId": 7}

Anything else raises ProtocolError, reported to the client as an
INVALID_EVENT error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.exceptions import ValidationError


class ProtocolError(ValidationError):
    """Raised for unknown event types and malformed payloads."""

    default_error_code = "INVALID_EVENT"


@dataclass(frozen=True)
class JoinChats:
    """Join the rooms of every active chat of the user."""


@dataclass(frozen=True)
class JoinChat:
    request_id: int


@dataclass(frozen=True)
class SendMessage:
    request_id: int
    content: str


@dataclass(frozen=True)
class MarkAsRead:
    chat_id: int


@dataclass(frozen=True)
class Typing:
    chat_id: int


@dataclass(frozen=True)
class StopTyping:
    chat_id: int


InboundEvent = JoinChats | JoinChat | SendMessage | MarkAsRead | Typing | StopTyping


def _require_id(content: dict[str, Any], key: str) -> int:
    """
    Read a positive integer id from the payload.

    Numeric strings are accepted since some clients send ids as text.
    """
    value = content.get(key)
    if isinstance(value, bool):
        value = None
    if isinstance(value, str) and value.strip().isdecimal():
        value = int(value.strip())
    if not isinstance(value, int) or value <= 0:
        raise ProtocolError(
            f"{key} must be a positive integer",
            details={"field": key},
        )
    return value


def parse_event(content: Any) -> InboundEvent:
    """
    Parse a decoded client frame into an inbound event.

    Raises:
        ProtocolError: Frame is not an object, type is unknown, or a
            required field is missing or malformed
    """
    if not isinstance(content, dict):
        raise ProtocolError("event must be a JSON object")

    match content.get("type"):
        case "join_chats":
            return JoinChats()
        case "join_chat":
            return JoinChat(request_id=_require_id(content, "requestId"))
        case "send_message":
            request_id = _require_id(content, "requestId")
            message = content.get("content")
            if not isinstance(message, str):
                raise ProtocolError(
                    "content must be a string", details={"field": "content"}
                )
            return SendMessage(request_id=request_id, content=message)
        case "mark_as_read":
            return MarkAsRead(chat_id=_require_id(content, "chatId"))
        case "typing":
            return Typing(chat_id=_require_id(content, "chatId"))
        case "stop_typing":
            return StopTyping(chat_id=_require_id(content, "chatId"))
        case unknown:
            raise ProtocolError(
                f"unknown event type: {unknown}", details={"type": unknown}
            )
