"""
Views for the chat REST API.

Realtime traffic goes through the websocket (see consumers.py). These
endpoints let clients load their chat list and catch up on history after
reconnecting.

URL Structure:
    /api/v1/chat/                              GET  Caller's chats
    /api/v1/chat/{request_id}/messages/        GET  Message log of a request's chat

Design Decisions:
    - Lookups go through ChatService, scoped to the caller's chats
    - A chat the caller does not take part in answers 404, like a missing one
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.serializers import ChatListSerializer, ChatMessageSerializer
from chat.services import ChatService


class ChatListView(APIView):
    """
    List the caller's chats, most recent activity first.

    GET /api/v1/chat/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_chats",
        summary="List chats",
        description=(
            "Chats the user takes part in, with the other participant, "
            "the last message and the number of unread messages."
        ),
        responses={200: ChatListSerializer(many=True)},
        tags=["Chat"],
    )
    def get(self, request):
        chats = ChatService.get_user_chats(request.user)
        serializer = ChatListSerializer(chats, many=True, context={"request": request})
        return Response(serializer.data)


class ChatMessagesView(APIView):
    """
    Full message log of the chat attached to a transport request.

    GET /api/v1/chat/{request_id}/messages/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_chat_messages",
        summary="Chat messages",
        description="All messages of the request's chat, in the order they were sent.",
        responses={
            200: ChatMessageSerializer(many=True),
            404: OpenApiResponse(description="Chat not found or access denied"),
        },
        tags=["Chat"],
    )
    def get(self, request, request_id: int):
        chat = ChatService.get_chat_for_request(request_id, request.user)
        if chat is None:
            return Response(
                {
                    "error": "channel not found or access denied",
                    "error_code": "CHAT_NOT_FOUND",
                },
                status=status.HTTP_404_NOT_FOUND,
            )

        messages = ChatService.get_messages(chat)
        return Response(
            {
                "chatId": chat.pk,
                "requestId": chat.request_id,
                "isActive": chat.is_active,
                "messages": ChatMessageSerializer(messages, many=True).data,
            }
        )
