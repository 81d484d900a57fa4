"""
URL configuration for transport API.

URL Structure:
    /     POST  Create a transport request

All URLs are prefixed with /api/v1/requests/ in the main URL configuration.
"""

from django.urls import path

from transport.views import TransportRequestCreateView

app_name = "transport"

urlpatterns = [
    path("", TransportRequestCreateView.as_view(), name="request-create"),
]
