"""SMS delivery with a daily per-farmer quota and retry/backoff."""

import asyncio
import weakref
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import func, select

from agrinotify.common.clock import LocalClock
from agrinotify.common.logging import logger, mask_phone
from agrinotify.common.metrics import (
    channel_deliveries_total,
    retries_total,
    sms_attempts_total,
    sms_quota_rejections_total,
)
from agrinotify.services.notification.models import SmsDeliveryLog
from agrinotify.services.notification.providers import SmsProvider
from agrinotify.templates.catalog import render_sms
from agrinotify.templates.renderer import template_key_name


QUOTA_EXCEEDED = "Daily SMS quota exceeded"
QUOTA_STATUSES = ("SENT", "DELIVERED")


@dataclass
class SmsRequest:
    farmer_id: str
    phone: str
    template_key: str
    params: dict[str, Any] = field(default_factory=dict)
    language: str | None = None


@dataclass
class SmsResult:
    success: bool
    message_id: str | None = None
    log_id: str | None = None
    error: str | None = None


class SmsChannel:
    """Renders, rate-limits and sends SMS, keeping one delivery log per send.

    The quota check and the send run under a per-farmer lock, so concurrent
    sends for one farmer in this process cannot both pass the check.
    """

    def __init__(
        self,
        session_factory,
        provider: SmsProvider,
        clock: LocalClock | None = None,
        daily_quota: int = 20,
        max_attempts: int = 3,
        retry_delays: list[float] | tuple[float, ...] = (1.0, 5.0, 15.0),
        sleep=asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.session_factory = session_factory
        self.provider = provider
        self.clock = clock or LocalClock()
        self.daily_quota = daily_quota
        self.max_attempts = max_attempts
        self.retry_delays = list(retry_delays)
        self._sleep = sleep
        # An entry lives only while a send for that farmer holds or awaits its lock.
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def sent_today(self, farmer_id: str) -> int:
        with self.session_factory() as db:
            return db.execute(
                select(func.count())
                .select_from(SmsDeliveryLog)
                .where(
                    SmsDeliveryLog.farmer_id == farmer_id,
                    SmsDeliveryLog.status.in_(QUOTA_STATUSES),
                    SmsDeliveryLog.created_at >= self.clock.local_midnight_utc(),
                )
            ).scalar_one()

    def _delay_after(self, attempt: int) -> float:
        if not self.retry_delays:
            return 0.0
        return self.retry_delays[min(attempt - 1, len(self.retry_delays) - 1)]

    def _create_log(self, req: SmsRequest) -> str:
        with self.session_factory() as db:
            log = SmsDeliveryLog(
                farmer_id=req.farmer_id,
                phone_number=req.phone,
                template_key=template_key_name(req.template_key),
                status="PENDING",
                retry_count=0,
                created_at=self.clock.utc_now(),
            )
            db.add(log)
            db.commit()
            return log.id

    def _update_log(self, log_id: str, **values) -> None:
        with self.session_factory() as db:
            log = db.get(SmsDeliveryLog, log_id)
            for key, value in values.items():
                setattr(log, key, value)
            db.commit()

    async def send(self, req: SmsRequest) -> SmsResult:
        lock = self._locks.get(req.farmer_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[req.farmer_id] = lock
        async with lock:
            return await self._send_locked(req)

    async def _send_locked(self, req: SmsRequest) -> SmsResult:
        if self.sent_today(req.farmer_id) >= self.daily_quota:
            sms_quota_rejections_total.inc()
            channel_deliveries_total.labels(channel="sms", outcome="quota_exceeded").inc()
            logger.warning("sms_quota_exceeded farmer_id=%s quota=%s", req.farmer_id, self.daily_quota)
            return SmsResult(success=False, error=QUOTA_EXCEEDED)

        text = render_sms(req.template_key, req.language, req.params)
        log_id = self._create_log(req)
        last_error = "unknown error"

        for attempt in range(1, self.max_attempts + 1):
            try:
                receipt = await self.provider.send(req.phone, text)
            except Exception as exc:
                last_error = str(exc) or exc.__class__.__name__
                sms_attempts_total.labels(outcome="failure").inc()
                self._update_log(log_id, retry_count=attempt, error_message=last_error)
                logger.warning(
                    "sms_attempt_failed phone=%s log_id=%s attempt=%s error=%s",
                    mask_phone(req.phone),
                    log_id,
                    attempt,
                    last_error,
                )
                if attempt < self.max_attempts:
                    retries_total.labels(dependency="sms_provider").inc()
                    await self._sleep(self._delay_after(attempt))
                continue

            sms_attempts_total.labels(outcome="success").inc()
            channel_deliveries_total.labels(channel="sms", outcome="success").inc()
            self._update_log(log_id, status="SENT", message_id=receipt.message_id, sent_at=self.clock.utc_now())
            logger.info(
                "sms_sent phone=%s log_id=%s message_id=%s attempt=%s",
                mask_phone(req.phone),
                log_id,
                receipt.message_id,
                attempt,
            )
            return SmsResult(success=True, message_id=receipt.message_id, log_id=log_id)

        self._update_log(log_id, status="FAILED", error_message=last_error)
        channel_deliveries_total.labels(channel="sms", outcome="failure").inc()
        logger.error("sms_failed phone=%s log_id=%s attempts=%s", mask_phone(req.phone), log_id, self.max_attempts)
        return SmsResult(success=False, log_id=log_id, error=last_error)

    def mark_delivered(self, message_id: str) -> bool:
        """Apply a provider delivery receipt."""

        with self.session_factory() as db:
            log = db.execute(
                select(SmsDeliveryLog).where(SmsDeliveryLog.message_id == message_id)
            ).scalar_one_or_none()
            if log is None:
                return False
            log.status = "DELIVERED"
            log.delivered_at = self.clock.utc_now()
            db.commit()
            return True

    def delivery_stats(self, farmer_id: str) -> dict:
        since = self.clock.local_midnight_utc()

        def _count(db, *filters) -> int:
            return db.execute(
                select(func.count())
                .select_from(SmsDeliveryLog)
                .where(SmsDeliveryLog.farmer_id == farmer_id, SmsDeliveryLog.created_at >= since, *filters)
            ).scalar_one()

        with self.session_factory() as db:
            today = _count(db)
            delivered = _count(db, SmsDeliveryLog.status == "DELIVERED")
            failed = _count(db, SmsDeliveryLog.status == "FAILED")
        return {
            "today": today,
            "today_delivered": delivered,
            "today_failed": failed,
            "remaining": max(0, self.daily_quota - self.sent_today(farmer_id)),
        }
