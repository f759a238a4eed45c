"""SMS quota, retry/backoff and delivery-log lifecycle."""

import asyncio
import gc
from datetime import timedelta

from sqlalchemy import func, select

from agrinotify.services.notification.channels.sms import QUOTA_EXCEEDED, SmsChannel, SmsRequest
from agrinotify.services.notification.models import SmsDeliveryLog
from conftest import FakeSmsProvider


def _channel(session_factory, provider, clock, sleeps, **kwargs):
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return SmsChannel(session_factory, provider, clock=clock, sleep=fake_sleep, **kwargs)


def _request(farmer_id: str = "farmer-1") -> SmsRequest:
    return SmsRequest(
        farmer_id=farmer_id,
        phone="+919800012345",
        template_key="PAYMENT_RECEIVED",
        params={"amount": "900", "crop_name": "Onion", "upi_id": "UPI123"},
        language="en",
    )


def _seed_logs(session_factory, clock, count: int, status: str = "SENT", farmer_id: str = "farmer-1", age=None):
    created_at = clock.utc_now() - (age or timedelta(0))
    with session_factory() as db:
        for _ in range(count):
            db.add(
                SmsDeliveryLog(
                    farmer_id=farmer_id,
                    phone_number="+919800012345",
                    template_key="ORDER_MATCHED",
                    status=status,
                    created_at=created_at,
                )
            )
        db.commit()


def _log_count(session_factory) -> int:
    with session_factory() as db:
        return db.execute(select(func.count()).select_from(SmsDeliveryLog)).scalar_one()


def test_successful_send_writes_sent_log(session_factory, clock, sleeps):
    provider = FakeSmsProvider()
    channel = _channel(session_factory, provider, clock, sleeps)
    result = asyncio.run(channel.send(_request()))

    assert result.success and result.message_id == "sms-1"
    assert provider.sent[0][1] == "CropFresh: ₹900 received for Onion. UPI Ref: UPI123. Check your bank."
    with session_factory() as db:
        log = db.get(SmsDeliveryLog, result.log_id)
        assert log.status == "SENT"
        assert log.message_id == "sms-1"
        assert log.retry_count == 0
        assert log.sent_at is not None
    assert sleeps == []


def test_quota_allows_send_below_limit(session_factory, clock, sleeps):
    _seed_logs(session_factory, clock, 19)
    channel = _channel(session_factory, FakeSmsProvider(), clock, sleeps)
    assert asyncio.run(channel.send(_request())).success
    assert _log_count(session_factory) == 20


def test_quota_rejects_at_limit_without_log_or_provider_call(session_factory, clock, sleeps):
    _seed_logs(session_factory, clock, 15)
    _seed_logs(session_factory, clock, 5, status="DELIVERED")
    provider = FakeSmsProvider()
    channel = _channel(session_factory, provider, clock, sleeps)
    result = asyncio.run(channel.send(_request()))

    assert not result.success
    assert result.error == QUOTA_EXCEEDED
    assert provider.calls == 0
    assert _log_count(session_factory) == 20


def test_quota_ignores_failed_and_yesterdays_logs(session_factory, clock, sleeps):
    _seed_logs(session_factory, clock, 20, status="FAILED")
    _seed_logs(session_factory, clock, 20, age=timedelta(days=1))
    channel = _channel(session_factory, FakeSmsProvider(), clock, sleeps)
    assert asyncio.run(channel.send(_request())).success


def test_quota_is_per_farmer(session_factory, clock, sleeps):
    _seed_logs(session_factory, clock, 20, farmer_id="someone-else")
    channel = _channel(session_factory, FakeSmsProvider(), clock, sleeps)
    assert asyncio.run(channel.send(_request())).success


def test_retry_exhaustion_marks_failed(session_factory, clock, sleeps):
    provider = FakeSmsProvider(failures=3, error="gateway timeout")
    channel = _channel(session_factory, provider, clock, sleeps)
    result = asyncio.run(channel.send(_request()))

    assert not result.success
    assert result.error == "gateway timeout"
    assert provider.calls == 3
    assert sleeps == [1.0, 5.0]
    with session_factory() as db:
        log = db.get(SmsDeliveryLog, result.log_id)
        assert log.status == "FAILED"
        assert log.retry_count == 3
        assert log.error_message == "gateway timeout"
    assert _log_count(session_factory) == 1


def test_recovers_on_third_attempt(session_factory, clock, sleeps):
    provider = FakeSmsProvider(failures=2)
    channel = _channel(session_factory, provider, clock, sleeps)
    result = asyncio.run(channel.send(_request()))

    assert result.success and result.message_id == "sms-3"
    assert sleeps == [1.0, 5.0]
    with session_factory() as db:
        log = db.get(SmsDeliveryLog, result.log_id)
        assert log.status == "SENT"
        assert log.retry_count == 2


def test_concurrent_sends_cannot_both_take_last_slot(session_factory, clock, sleeps):
    _seed_logs(session_factory, clock, 19)
    channel = _channel(session_factory, FakeSmsProvider(), clock, sleeps)

    async def both():
        return await asyncio.gather(channel.send(_request()), channel.send(_request()))

    results = asyncio.run(both())
    assert sorted(r.success for r in results) == [False, True]


def test_farmer_locks_are_released_after_sends(session_factory, clock, sleeps):
    channel = _channel(session_factory, FakeSmsProvider(), clock, sleeps)

    async def many():
        await asyncio.gather(*(channel.send(_request(f"farmer-{n}")) for n in range(50)))
        await channel.send(_request("farmer-0"))

    asyncio.run(many())
    gc.collect()
    assert len(channel._locks) == 0


def test_delivery_receipt_and_stats(session_factory, clock, sleeps):
    _seed_logs(session_factory, clock, 2, status="FAILED")
    channel = _channel(session_factory, FakeSmsProvider(), clock, sleeps)
    result = asyncio.run(channel.send(_request()))

    assert channel.mark_delivered(result.message_id)
    assert not channel.mark_delivered("unknown-id")
    assert channel.delivery_stats("farmer-1") == {
        "today": 3,
        "today_delivered": 1,
        "today_failed": 2,
        "remaining": 19,
    }
