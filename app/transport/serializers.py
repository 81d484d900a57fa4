"""
Serializers for the transport API.

- TransportRequestCreateSerializer: Input of POST /api/v1/requests/
- TransportRequestSerializer: A request as shown to shipper and driver,
  also used as the payload of the "new_request" websocket event
- TripSummarySerializer: Trip fields embedded in request payloads

Keys are camelCase, like the chat payloads.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from transport.models import CargoType, TransportRequest, Trip


class TripSummarySerializer(serializers.ModelSerializer):
    departureCity = serializers.CharField(source="departure_city", read_only=True)
    destinationCity = serializers.CharField(source="destination_city", read_only=True)
    departureDate = serializers.DateTimeField(source="departure_date", read_only=True)
    driverId = serializers.IntegerField(source="driver_id", read_only=True)

    class Meta:
        model = Trip
        fields = ["id", "departureCity", "destinationCity", "departureDate", "driverId"]
        read_only_fields = fields


class TransportRequestSerializer(serializers.ModelSerializer):
    """
    Read serializer for a transport request.

    chatId is null only for requests created outside the service layer
    that have not been reconciled yet.
    """

    trip = TripSummarySerializer(read_only=True)
    sender = UserSummarySerializer(read_only=True)
    cargoType = serializers.CharField(source="cargo_type", read_only=True)
    weightKg = serializers.DecimalField(
        source="weight_kg", max_digits=8, decimal_places=2, read_only=True
    )
    pickupAddress = serializers.CharField(source="pickup_address", read_only=True)
    deliveryAddress = serializers.CharField(source="delivery_address", read_only=True)
    proposedPrice = serializers.DecimalField(
        source="proposed_price",
        max_digits=10,
        decimal_places=2,
        read_only=True,
        allow_null=True,
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    chatId = serializers.SerializerMethodField()

    class Meta:
        model = TransportRequest
        fields = [
            "id",
            "trip",
            "sender",
            "cargoType",
            "weightKg",
            "description",
            "pickupAddress",
            "deliveryAddress",
            "proposedPrice",
            "status",
            "createdAt",
            "chatId",
        ]
        read_only_fields = fields

    def get_chatId(self, obj: TransportRequest) -> int | None:
        chat = getattr(obj, "chat", None)
        return chat.pk if chat is not None else None


class TransportRequestCreateSerializer(serializers.Serializer):
    """
    Validates the body of a request creation.

    Business rules (own trip, inactive trip, capacity) are checked by
    TransportRequestService, not here.
    """

    tripId = serializers.IntegerField(min_value=1)
    cargoType = serializers.ChoiceField(
        choices=CargoType.choices, default=CargoType.OTHER
    )
    weightKg = serializers.DecimalField(
        max_digits=8, decimal_places=2, min_value=Decimal("0.1")
    )
    description = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default=""
    )
    pickupAddress = serializers.CharField(max_length=255)
    deliveryAddress = serializers.CharField(max_length=255)
    proposedPrice = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0"),
        required=False,
        allow_null=True,
        default=None,
    )
