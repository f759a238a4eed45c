"""HTTP surface exercised through FastAPI's TestClient."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from agrinotify.common.logging import farmer_id_ctx
from agrinotify.services.notification.api import bind_farmer, create_app


@pytest.fixture
def client(service):
    with TestClient(create_app(service)) as test_client:
        yield test_client


def test_health_and_metrics(client):
    assert client.get("/health").json() == {"ok": True}
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "notifications_total" in resp.text


def test_preferences_round_trip(client):
    resp = client.get("/farmers/farmer-1/preferences")
    assert resp.status_code == 200
    assert resp.json()["quiet_hours_start"] == "22:00"

    resp = client.put("/farmers/farmer-1/preferences", json={"notification_level": "CRITICAL", "sms_enabled": False})
    assert resp.status_code == 200
    body = resp.json()
    assert body["notification_level"] == "CRITICAL"
    assert body["sms_enabled"] is False
    assert body["push_enabled"] is True


@pytest.mark.parametrize(
    "payload",
    [{"quiet_hours_start": "24:00"}, {"quiet_hours_end": "6am"}, {"notification_level": "LOUD"}],
)
def test_preferences_validation(client, payload):
    assert client.put("/farmers/farmer-1/preferences", json=payload).status_code == 422


def test_send_and_manage_inbox(client, push_provider):
    assert client.post("/farmers/farmer-1/devices", json={"token": "tok-a", "device_type": "android"}).status_code == 201

    resp = client.post(
        "/notifications/send",
        json={
            "farmer_id": "farmer-1",
            "type": "HAULER_EN_ROUTE",
            "title": "🚛 Hauler On The Way",
            "body": "Ravi arriving in 10 minutes",
            "metadata": {"hauler_name": "Ravi", "eta_minutes": "10"},
        },
    )
    result = resp.json()
    assert result["success"] and result["push_success_count"] == 1
    notification_id = result["notification_id"]

    assert client.get("/farmers/farmer-1/notifications/unread-count").json() == {"unread_count": 1}
    listing = client.get("/farmers/farmer-1/notifications", params={"limit": 10}).json()
    assert listing["total"] == 1 and listing["notifications"][0]["id"] == notification_id

    assert client.post(f"/farmers/farmer-1/notifications/{notification_id}/read").status_code == 200
    assert client.post("/farmers/farmer-1/notifications/read-all").json() == {"updated": 0}
    assert client.post("/farmers/farmer-2/notifications/nope/read").status_code == 404
    assert client.delete(f"/farmers/farmer-1/notifications/{notification_id}").status_code == 200
    assert client.delete(f"/farmers/farmer-1/notifications/{notification_id}").status_code == 404

    assert client.request("DELETE", "/farmers/farmer-1/devices", json={"token": "tok-a"}).status_code == 200
    assert client.request("DELETE", "/farmers/farmer-1/devices", json={"token": "tok-z"}).status_code == 404


def test_dispatch_event_endpoint(client):
    event = {
        "event_type": "MATCH_EXPIRING",
        "payload": {
            "eventId": "evt-http",
            "orderId": "o-1",
            "farmerId": "farmer-1",
            "phoneNumber": "+919800012345",
            "cropName": "Tomato",
            "hoursRemaining": 2,
        },
    }
    assert client.post("/events", json=event).json() == {"processed": True}
    assert client.post("/events", json=event).json() == {"processed": False}
    assert client.post("/events", json={"event_type": "NOPE", "payload": {}}).json() == {"processed": False}


def test_sms_stats(client):
    client.post(
        "/notifications/send",
        json={
            "farmer_id": "farmer-1",
            "type": "PAYMENT_RECEIVED",
            "title": "💰 Payment Received",
            "body": "₹10",
            "phone_number": "+919800012345",
            "metadata": {"amount": "10", "crop_name": "Onion", "upi_id": "U1"},
        },
    )
    assert client.get("/farmers/farmer-1/sms-stats").json() == {
        "today": 1,
        "today_delivered": 0,
        "today_failed": 0,
        "remaining": 19,
    }


def test_direct_sms(client, sms_provider):
    resp = client.post(
        "/sms/send",
        json={
            "farmer_id": "farmer-1",
            "phone_number": "+919800012345",
            "template_key": "OTP",
            "variables": {"otp": "1234", "valid_minutes": 10},
        },
    )
    body = resp.json()
    assert body["success"] and body["message_id"] == "sms-1" and body["log_id"]
    assert "1234" in sms_provider.sent[0][1]


def test_direct_push(client, push_provider):
    client.post("/farmers/farmer-1/devices", json={"token": "tok-a"})
    resp = client.post(
        "/push/send",
        json={"farmer_id": "farmer-1", "title": "Mandi prices", "body": "Tomato up 8%", "data": {"crop": "Tomato"}},
    )
    assert resp.json() == {"success": True, "success_count": 1, "failure_count": 0, "invalid_tokens": []}
    _, message, priority = push_provider.sent[0]
    assert message["data"]["crop"] == "Tomato" and priority == "normal"


def test_templated_send(client):
    resp = client.post(
        "/notifications/send-templated",
        json={
            "farmer_id": "farmer-1",
            "template_type": "MATCH_EXPIRED",
            "channels": ["in_app"],
            "variables": {"crop_name": "Ragi"},
        },
    )
    [result] = resp.json()["results"]
    assert result["channel"] == "in_app" and result["success"]
    assert client.get("/farmers/farmer-1/notifications/unread-count").json() == {"unread_count": 1}


def test_templated_send_rejects_unknown_channel(client):
    payload = {"farmer_id": "farmer-1", "template_type": "OTP", "channels": ["fax"]}
    assert client.post("/notifications/send-templated", json=payload).status_code == 422


def test_farmer_binding_is_reset_after_request():
    async def run():
        binding = bind_farmer("farmer-9")
        assert await binding.__anext__() == "farmer-9"
        assert farmer_id_ctx.get() == "farmer-9"
        with pytest.raises(StopAsyncIteration):
            await binding.__anext__()
        return farmer_id_ctx.get()

    assert asyncio.run(run()) == ""
