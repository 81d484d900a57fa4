import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Trip",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                ("departure_city", models.CharField(max_length=100)),
                ("departure_address", models.CharField(max_length=255)),
                ("destination_city", models.CharField(max_length=100)),
                ("destination_address", models.CharField(max_length=255)),
                ("departure_date", models.DateTimeField()),
                ("arrival_date", models.DateTimeField()),
                (
                    "available_weight_kg",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Remaining cargo capacity in kilograms",
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                (
                    "price_per_kg",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "description",
                    models.TextField(blank=True, default="", max_length=500),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="active",
                        max_length=20,
                    ),
                ),
                (
                    "driver",
                    models.ForeignKey(
                        help_text="Driver publishing the trip",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="trips",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["departure_date"],
                "indexes": [
                    models.Index(
                        fields=["driver", "status"],
                        name="transport_t_driver__a3c1e2_idx",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="TransportRequest",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "cargo_type",
                    models.CharField(
                        choices=[
                            ("fragile", "Fragile"),
                            ("liquid", "Liquid"),
                            ("dangerous", "Dangerous"),
                            ("food", "Food"),
                            ("electronics", "Electronics"),
                            ("textile", "Textile"),
                            ("furniture", "Furniture"),
                            ("other", "Other"),
                        ],
                        default="other",
                        max_length=20,
                    ),
                ),
                (
                    "weight_kg",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(0.1)],
                    ),
                ),
                (
                    "description",
                    models.TextField(blank=True, default="", max_length=500),
                ),
                ("pickup_address", models.CharField(max_length=255)),
                ("delivery_address", models.CharField(max_length=255)),
                (
                    "proposed_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("accepted", "Accepted"),
                            ("rejected", "Rejected"),
                            ("cancelled", "Cancelled"),
                            ("in_transit", "In transit"),
                            ("delivered", "Delivered"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "trip",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="requests",
                        to="transport.trip",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="Shipper who sent the request",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["sender", "status"],
                        name="transport_t_sender__7b9d4f_idx",
                    )
                ],
            },
        ),
    ]
