"""End-to-end routing through preferences, channels and the inbox."""

import asyncio
from datetime import datetime

from agrinotify.services.notification.router import SendNotificationParams, category_for, is_critical


def _params(**overrides) -> SendNotificationParams:
    fields = {
        "farmer_id": "farmer-1",
        "type": "PAYMENT_RECEIVED",
        "title": "💰 Payment Received",
        "body": "₹900 for Onion. Check your bank.",
        "phone_number": "+919800012345",
        "metadata": {"amount": "900", "crop_name": "Onion", "upi_id": "UPI1"},
        "language": "en",
    }
    fields.update(overrides)
    return SendNotificationParams(**fields)


def test_criticality_and_category_tables():
    assert is_critical("ORDER_MATCHED") and is_critical("QUALITY_DISPUTE")
    assert not is_critical("HAULER_EN_ROUTE")
    assert is_critical("HAULER_EN_ROUTE", force_sms=True)
    assert category_for("PAYMENT_RECEIVED") == "payment"
    assert category_for("EDUCATIONAL_CONTENT") == "educational"
    assert category_for("PICKUP_COMPLETE") == "order"


def test_critical_notification_uses_all_surfaces(service, sms_provider, push_provider):
    service.device_tokens.register_token("farmer-1", "tok-a")
    result = asyncio.run(service.send_notification(_params()))

    assert result.success
    assert result.sms_success and result.sms_message_id == "sms-1"
    assert result.push_success and result.push_success_count == 1
    assert result.notification_id is not None
    assert push_provider.sent[0][2] == "high"
    assert push_provider.sent[0][1]["data"]["notification_id"] == result.notification_id
    assert service.inbox.unread_count("farmer-1") == 1


def test_non_critical_skips_sms(service, sms_provider):
    result = asyncio.run(service.send_notification(_params(type="PICKUP_COMPLETE")))
    assert result.success
    assert sms_provider.calls == 0
    assert not result.sms_success


def test_missing_phone_skips_sms(service, sms_provider):
    result = asyncio.run(service.send_notification(_params(phone_number=None)))
    assert result.success and sms_provider.calls == 0


def test_muted_category_still_stores_in_app_record(service, sms_provider, push_provider):
    """CRITICAL level plus order updates off: nothing is sent, the record is kept."""

    service.preferences.update_preferences("farmer-1", notification_level="CRITICAL", order_updates=False)
    service.device_tokens.register_token("farmer-1", "tok-a")
    result = asyncio.run(service.send_notification(_params(type="HAULER_EN_ROUTE")))

    assert result.success
    assert result.notification_id is not None
    assert sms_provider.calls == 0 and push_provider.sent == []
    assert service.inbox.list_for_farmer("farmer-1")["total"] == 1


def test_critical_push_goes_out_during_quiet_hours(service, clock, push_provider):
    clock.set(datetime(2026, 10, 17, 23, 30))
    service.device_tokens.register_token("farmer-1", "tok-a")

    critical = asyncio.run(service.send_notification(_params(type="ORDER_MATCHED")))
    assert critical.push_success_count == 1

    routine = asyncio.run(service.send_notification(_params(type="PICKUP_COMPLETE")))
    assert routine.push_success_count == 0
    assert len(push_provider.sent) == 1


def test_inbox_failure_does_not_block_channels(service, sms_provider, monkeypatch):
    def broken_create(**kwargs):
        raise RuntimeError("database is down")

    monkeypatch.setattr(service.inbox, "create", broken_create)
    result = asyncio.run(service.send_notification(_params()))

    assert result.notification_id is None
    assert result.sms_success
    assert result.success


def test_channel_exception_is_captured(service, monkeypatch):
    async def exploding_send(req):
        raise RuntimeError("boom")

    monkeypatch.setattr(service.sms, "send", exploding_send)
    result = asyncio.run(service.send_notification(_params()))

    assert not result.sms_success
    assert result.sms_error == "boom"
    assert result.success


def test_quota_error_surfaces_in_result(service, sms_provider, monkeypatch):
    monkeypatch.setattr(service.sms, "daily_quota", 0)
    result = asyncio.run(service.send_notification(_params()))
    assert result.sms_error == "Daily SMS quota exceeded"
    assert sms_provider.calls == 0
