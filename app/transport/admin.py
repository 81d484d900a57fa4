"""
Django admin configuration for transport models.
"""

from django.contrib import admin

from transport.models import TransportRequest, Trip


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "driver",
        "departure_city",
        "destination_city",
        "departure_date",
        "available_weight_kg",
        "status",
    ]
    list_filter = ["status", "departure_date"]
    search_fields = ["departure_city", "destination_city", "driver__email"]
    raw_id_fields = ["driver"]


@admin.register(TransportRequest)
class TransportRequestAdmin(admin.ModelAdmin):
    """
    Admin interface for TransportRequest model.

    Requests added here get their chat from the hourly reconciliation task.
    """

    list_display = [
        "id",
        "trip",
        "sender",
        "cargo_type",
        "weight_kg",
        "status",
        "created_at",
    ]
    list_filter = ["status", "cargo_type", "created_at"]
    search_fields = ["sender__email", "pickup_address", "delivery_address"]
    raw_id_fields = ["trip", "sender"]
