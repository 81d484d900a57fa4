"""
Test configuration and fixtures for transport tests.

Usage:
    def test_example(shipper_client, active_trip):
        response = shipper_client.post("/api/v1/requests/", {...}, format="json")
        assert response.status_code == 201
"""

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import DriverFactory, ShipperFactory
from transport.tests.factories import TripFactory


@pytest.fixture
def driver(db):
    return DriverFactory(first_name="Karim", last_name="Benali")


@pytest.fixture
def shipper(db):
    return ShipperFactory(first_name="Sofia", last_name="Martin")


@pytest.fixture
def active_trip(db, driver):
    """Active Paris -> Lyon trip with 100 kg of capacity."""
    return TripFactory(driver=driver)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def shipper_client(shipper):
    """API client authenticated as the shipper."""
    client = APIClient()
    client.force_authenticate(user=shipper)
    return client


@pytest.fixture
def driver_client(driver):
    """API client authenticated as the driver."""
    client = APIClient()
    client.force_authenticate(user=driver)
    return client


@pytest.fixture
def request_payload(active_trip):
    """Valid body for POST /api/v1/requests/."""
    return {
        "tripId": active_trip.id,
        "cargoType": "fragile",
        "weightKg": "12.50",
        "description": "Vaisselle emballée",
        "pickupAddress": "12 rue de la Paix, Paris",
        "deliveryAddress": "3 place Bellecour, Lyon",
        "proposedPrice": "30.00",
    }
