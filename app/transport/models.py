"""
Transport marketplace models.

Models:
    Trip: A journey published by a driver with spare cargo capacity
    TransportRequest: A shipper's request to send cargo on a trip

Design Decisions:
    - A request always belongs to exactly one trip and one sender
    - Every request gets exactly one chat (see chat.models.Chat.request),
      created in the same transaction as the request itself
    - Status transitions beyond creation are not modelled here
"""

from __future__ import annotations

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from core.models import BaseModel


class TripStatus(models.TextChoices):
    """Lifecycle of a published trip."""

    ACTIVE = "active", "Active"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class RequestStatus(models.TextChoices):
    """
    Lifecycle of a transport request.

    PENDING: Waiting for the driver's answer
    ACCEPTED / REJECTED: Driver's decision
    CANCELLED: Withdrawn by the shipper
    IN_TRANSIT / DELIVERED: Cargo on its way / handed over
    """

    PENDING = "pending", "Pending"
    ACCEPTED = "accepted", "Accepted"
    REJECTED = "rejected", "Rejected"
    CANCELLED = "cancelled", "Cancelled"
    IN_TRANSIT = "in_transit", "In transit"
    DELIVERED = "delivered", "Delivered"


class CargoType(models.TextChoices):
    FRAGILE = "fragile", "Fragile"
    LIQUID = "liquid", "Liquid"
    DANGEROUS = "dangerous", "Dangerous"
    FOOD = "food", "Food"
    ELECTRONICS = "electronics", "Electronics"
    TEXTILE = "textile", "Textile"
    FURNITURE = "furniture", "Furniture"
    OTHER = "other", "Other"


class Trip(BaseModel):
    """
    A trip offered by a driver.

    Fields:
        driver: User driving the trip (receives request notifications)
        departure_city / departure_address: Where the trip starts
        destination_city / destination_address: Where the trip ends
        departure_date / arrival_date: Planned schedule
        available_weight_kg: Remaining cargo capacity
        price_per_kg: Asking price
        status: active, completed or cancelled
    """

    driver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="trips",
        help_text="Driver publishing the trip",
    )
    departure_city = models.CharField(max_length=100)
    departure_address = models.CharField(max_length=255)
    destination_city = models.CharField(max_length=100)
    destination_address = models.CharField(max_length=255)
    departure_date = models.DateTimeField()
    arrival_date = models.DateTimeField()
    available_weight_kg = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(1)],
        help_text="Remaining cargo capacity in kilograms",
    )
    price_per_kg = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    description = models.TextField(max_length=500, blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=TripStatus.choices,
        default=TripStatus.ACTIVE,
        db_index=True,
    )

    class Meta:
        ordering = ["departure_date"]
        indexes = [
            models.Index(
                fields=["driver", "status"], name="transport_t_driver__a3c1e2_idx"
            ),
        ]

    def __str__(self) -> str:
        return f"Trip {self.pk}: {self.departure_city} -> {self.destination_city}"

    @property
    def is_active(self) -> bool:
        return self.status == TripStatus.ACTIVE


class TransportRequest(BaseModel):
    """
    A shipper's request to carry cargo on a trip.

    Creation goes through TransportRequestService.create_request(), which
    also provisions the request's chat. Rows created any other way are
    picked up by the chat reconciliation task.
    """

    trip = models.ForeignKey(
        Trip,
        on_delete=models.CASCADE,
        related_name="requests",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_requests",
        help_text="Shipper who sent the request",
    )
    cargo_type = models.CharField(
        max_length=20,
        choices=CargoType.choices,
        default=CargoType.OTHER,
    )
    weight_kg = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(0.1)],
    )
    description = models.TextField(max_length=500, blank=True, default="")
    pickup_address = models.CharField(max_length=255)
    delivery_address = models.CharField(max_length=255)
    proposed_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    status = models.CharField(
        max_length=20,
        choices=RequestStatus.choices,
        default=RequestStatus.PENDING,
        db_index=True,
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["sender", "status"], name="transport_t_sender__7b9d4f_idx"
            ),
        ]

    def __str__(self) -> str:
        return f"TransportRequest {self.pk} on trip {self.trip_id}"
