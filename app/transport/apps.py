"""
Transport application configuration.
"""

from django.apps import AppConfig


class TransportConfig(AppConfig):
    """Configuration for the transport application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "transport"
    verbose_name = "Transport"
