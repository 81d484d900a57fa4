"""
Test configuration and fixtures for chat tests.

This module provides:
- The two participants of a chat (a shipper and a driver) and an outsider
- A transport request on the driver's trip with its chat
- API clients authenticated as each user
- JWT access tokens for websocket handshakes
- A clean in-memory channel layer per test

Usage:
    def test_example(chat, shipper_client):
        response = shipper_client.get(f"/api/v1/chat/{chat.request_id}/messages/")
        assert response.status_code == 200
"""

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from authentication.tests.factories import DriverFactory, ShipperFactory
from chat.tests.factories import ChatFactory
from transport.tests.factories import TransportRequestFactory, TripFactory


# =============================================================================
# Channel Layer
# =============================================================================


@pytest.fixture(autouse=True)
def clean_channel_layer():
    """Drop groups and queued events left over by a previous test."""
    channel_layer = get_channel_layer()
    async_to_sync(channel_layer.flush)()
    yield channel_layer


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def driver(db):
    """Driver of the trip, one participant of the chat."""
    return DriverFactory(first_name="Karim", last_name="Benali")


@pytest.fixture
def shipper(db):
    """Shipper who sent the request, the other participant."""
    return ShipperFactory(first_name="Sofia", last_name="Martin")


@pytest.fixture
def outsider(db):
    """A shipper with no part in the chat."""
    return ShipperFactory(first_name="Luc", last_name="Moreau")


# =============================================================================
# Request and Chat Fixtures
# =============================================================================


@pytest.fixture
def trip(driver):
    return TripFactory(driver=driver)


@pytest.fixture
def transport_request(trip, shipper):
    return TransportRequestFactory(trip=trip, sender=shipper)


@pytest.fixture
def chat(transport_request):
    """Active chat between shipper and driver, no messages yet."""
    return ChatFactory(request=transport_request)


# =============================================================================
# Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def shipper_client(shipper):
    return _client_for(shipper)


@pytest.fixture
def driver_client(driver):
    return _client_for(driver)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)


# =============================================================================
# Token Helpers
# =============================================================================


@pytest.fixture
def make_token():
    """Build a signed JWT access token for a websocket handshake."""

    def _make(user) -> str:
        return str(AccessToken.for_user(user))

    return _make
