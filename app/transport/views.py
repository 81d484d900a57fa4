"""
Views for the transport API.

URL Structure:
    /api/v1/requests/     POST  Create a transport request (and its chat)

Design Decisions:
    - Business rules live in TransportRequestService
    - Service error codes map to HTTP statuses in ERROR_STATUS
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from transport.serializers import (
    TransportRequestCreateSerializer,
    TransportRequestSerializer,
)
from transport.services import TransportRequestService

ERROR_STATUS = {
    "SHIPPER_REQUIRED": status.HTTP_403_FORBIDDEN,
    "CHAT_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
}


class TransportRequestCreateView(APIView):
    """
    Create a transport request on a trip.

    POST /api/v1/requests/

    The response is sent once the request's chat exists; it carries the
    chat id so the client can join the chat right away.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="create_transport_request",
        summary="Create transport request",
        request=TransportRequestCreateSerializer,
        responses={
            201: TransportRequestSerializer,
            400: OpenApiResponse(
                description="Invalid body, own trip, inactive trip or overweight cargo"
            ),
            403: OpenApiResponse(description="Only shippers can send requests"),
            409: OpenApiResponse(description="Chat provisioning conflict"),
        },
        tags=["Transport"],
    )
    def post(self, request):
        serializer = TransportRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = TransportRequestService.create_request(
            sender=request.user,
            trip_id=data["tripId"],
            weight_kg=data["weightKg"],
            pickup_address=data["pickupAddress"],
            delivery_address=data["deliveryAddress"],
            cargo_type=data["cargoType"],
            description=data["description"],
            proposed_price=data["proposedPrice"],
        )

        if not result.success:
            return Response(
                result.to_response(),
                status=ERROR_STATUS.get(
                    result.error_code, status.HTTP_400_BAD_REQUEST
                ),
            )

        return Response(
            TransportRequestSerializer(result.data).data,
            status=status.HTTP_201_CREATED,
        )
