"""
Tests for POST /api/v1/requests/.

The response must only be sent once the chat exists, and must carry its id.
"""

from unittest.mock import patch

from chat.models import Chat
from chat.services import ChatProvisioningError
from transport.models import TransportRequest

URL = "/api/v1/requests/"


class TestTransportRequestCreateView:
    def test_creates_request_and_returns_chat_id(self, shipper_client, request_payload):
        """
        Given an authenticated shipper
        When they POST a valid request
        Then the response is 201 and carries the id of the new chat
        """
        response = shipper_client.post(URL, request_payload, format="json")

        assert response.status_code == 201
        body = response.json()
        chat = Chat.objects.get(request_id=body["id"])
        assert body["chatId"] == chat.id
        assert body["cargoType"] == "fragile"
        assert body["weightKg"] == "12.50"
        assert body["sender"]["firstName"] == "Sofia"
        assert body["status"] == "pending"

    def test_requires_authentication(self, api_client, request_payload):
        response = api_client.post(URL, request_payload, format="json")

        assert response.status_code == 401
        assert TransportRequest.objects.count() == 0

    def test_driver_gets_403(self, driver_client, request_payload):
        response = driver_client.post(URL, request_payload, format="json")

        assert response.status_code == 403
        assert response.json()["error_code"] == "SHIPPER_REQUIRED"

    def test_overweight_gets_400(self, shipper_client, request_payload):
        request_payload["weightKg"] = "500.00"

        response = shipper_client.post(URL, request_payload, format="json")

        assert response.status_code == 400
        assert response.json()["error_code"] == "INSUFFICIENT_CAPACITY"

    def test_missing_fields_get_400(self, shipper_client, active_trip):
        response = shipper_client.post(URL, {"tripId": active_trip.id}, format="json")

        assert response.status_code == 400
        assert "pickupAddress" in response.json()

    def test_provisioning_conflict_gets_409(self, shipper_client, request_payload):
        error = ChatProvisioningError("conflict", error_code="CHAT_ALREADY_EXISTS")
        with patch(
            "transport.services.ChatProvisioningService.provision_for_request",
            side_effect=error,
        ):
            response = shipper_client.post(URL, request_payload, format="json")

        assert response.status_code == 409
        assert TransportRequest.objects.count() == 0

    def test_notifier_failure_still_returns_201(
        self, shipper_client, request_payload, django_capture_on_commit_callbacks
    ):
        with patch(
            "transport.services.RealtimeNotifier.new_request",
            side_effect=ConnectionError("channel layer unavailable"),
        ):
            with django_capture_on_commit_callbacks(execute=True):
                response = shipper_client.post(URL, request_payload, format="json")

        assert response.status_code == 201
        assert Chat.objects.filter(request_id=response.json()["id"]).exists()
