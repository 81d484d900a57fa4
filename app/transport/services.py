"""
Transport service layer.

Services:
    TransportRequestService: Creating transport requests

Request creation is the only way chats come into existence during normal
operation: the request row and its chat are written in one transaction,
and the trip's driver is told about the request once it has committed.

Usage:
    from transport.services import TransportRequestService

    result = TransportRequestService.create_request(
        sender=shipper,
        trip_id=trip.id,
        weight_kg=Decimal("12.5"),
        pickup_address="12 rue de la Paix, Paris",
        delivery_address="3 place Bellecour, Lyon",
    )
    if result.success:
        transport_request = result.data
        chat = transport_request.chat
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from django.db import transaction

from core.services import BaseService, ServiceResult

from chat.services import (
    ChatProvisioningError,
    ChatProvisioningService,
    RealtimeNotifier,
)
from transport.models import CargoType, TransportRequest, Trip
from transport.serializers import TransportRequestSerializer

if TYPE_CHECKING:
    from authentication.models import User


class TransportRequestService(BaseService):
    """
    Service for transport request operations.

    Methods:
        create_request: Create a request and its chat atomically
    """

    @classmethod
    def create_request(
        cls,
        sender: User,
        trip_id: int,
        weight_kg: Decimal,
        pickup_address: str,
        delivery_address: str,
        cargo_type: str = CargoType.OTHER,
        description: str = "",
        proposed_price: Decimal | None = None,
    ) -> ServiceResult[TransportRequest]:
        """
        Create a transport request on a trip.

        The request and its chat are committed together; if the chat cannot
        be created the request is rolled back too.

        Args:
            sender: Shipper sending the request
            trip_id: Trip the cargo should travel on
            weight_kg: Cargo weight, at most the trip's available capacity
            pickup_address / delivery_address: Where to collect and drop off
            cargo_type: One of CargoType
            description: Optional free text
            proposed_price: Optional price offer

        Returns:
            ServiceResult with the TransportRequest (its chat attached)

        Error codes:
            SHIPPER_REQUIRED: Sender is not a shipper
            TRIP_NOT_FOUND: No such trip
            OWN_TRIP: Sender drives this trip
            TRIP_NOT_ACTIVE: Trip is completed or cancelled
            INSUFFICIENT_CAPACITY: Weight exceeds available capacity
            CHAT_ALREADY_EXISTS: Chat provisioning conflict
        """
        if not sender.is_shipper:
            return ServiceResult.failure(
                "Only shippers can send transport requests",
                error_code="SHIPPER_REQUIRED",
            )

        trip = Trip.objects.select_related("driver").filter(pk=trip_id).first()
        if trip is None:
            return ServiceResult.failure(
                "Trip not found",
                error_code="TRIP_NOT_FOUND",
            )

        if trip.driver_id == sender.pk:
            return ServiceResult.failure(
                "You cannot send a request on your own trip",
                error_code="OWN_TRIP",
            )

        if not trip.is_active:
            return ServiceResult.failure(
                "This trip is no longer available",
                error_code="TRIP_NOT_ACTIVE",
            )

        if weight_kg > trip.available_weight_kg:
            return ServiceResult.failure(
                "Cargo weight exceeds the trip's available capacity",
                error_code="INSUFFICIENT_CAPACITY",
                errors={"weightKg": [f"At most {trip.available_weight_kg} kg"]},
            )

        try:
            with cls.atomic():
                transport_request = TransportRequest.objects.create(
                    trip=trip,
                    sender=sender,
                    cargo_type=cargo_type,
                    weight_kg=weight_kg,
                    description=description,
                    pickup_address=pickup_address,
                    delivery_address=delivery_address,
                    proposed_price=proposed_price,
                )
                ChatProvisioningService.provision_for_request(transport_request)
                transaction.on_commit(
                    lambda: cls._notify_driver(transport_request)
                )
        except ChatProvisioningError as e:
            return ServiceResult.from_exception(e)

        cls.get_logger().info(
            f"User {sender.id} created request {transport_request.pk} "
            f"on trip {trip.pk}"
        )
        return ServiceResult.success(transport_request)

    @classmethod
    def _notify_driver(cls, transport_request: TransportRequest) -> None:
        """
        Send the new_request event to the trip driver's personal room.

        Runs after commit: the request and its chat already exist, so a
        channel layer failure is logged and never reaches the caller.
        """
        try:
            summary = TransportRequestSerializer(transport_request).data
            RealtimeNotifier.new_request(
                transport_request.trip.driver_id, dict(summary)
            )
        except Exception:
            cls.get_logger().exception(
                f"Failed to notify driver of request {transport_request.pk}"
            )
