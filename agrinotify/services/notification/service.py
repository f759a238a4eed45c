"""Notification service facade: wiring, Kafka consumer and retention loop."""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from agrinotify.common.clock import LocalClock
from agrinotify.common.config import CommonSettings
from agrinotify.common.db import create_session_factory
from agrinotify.common.dedupe import RecentEventCache
from agrinotify.common.events import EventEnvelope, consume_forever
from agrinotify.common.logging import logger
from agrinotify.common.metrics import retention_deleted_total
from agrinotify.services.notification.channels.push import PushChannel, PushRequest, PushResult
from agrinotify.services.notification.channels.sms import SmsChannel, SmsRequest, SmsResult
from agrinotify.services.notification.device_tokens import DeviceTokenRepository
from agrinotify.services.notification.dispatcher import EventDispatcher
from agrinotify.services.notification.inbox import NotificationRepository
from agrinotify.services.notification.preferences import PreferencesRepository
from agrinotify.services.notification.providers import (
    HttpPushProvider,
    HttpSmsProvider,
    LoggingPushProvider,
    LoggingSmsProvider,
    PushProvider,
    SmsProvider,
)
from agrinotify.services.notification.router import (
    NotificationResult,
    NotificationRouter,
    SendNotificationParams,
    is_critical,
)
from agrinotify.templates.catalog import default_deeplink, render_push
from agrinotify.templates.renderer import template_key_name


@dataclass
class ChannelSendResult:
    channel: str
    success: bool
    id: str | None = None
    error: str | None = None


class NotificationService:
    """Everything callers need, built from injected collaborators."""

    def __init__(
        self,
        session_factory,
        sms_provider: SmsProvider,
        push_provider: PushProvider,
        clock: LocalClock | None = None,
        daily_sms_quota: int = 20,
        sms_max_attempts: int = 3,
        sms_retry_delays: list[float] | tuple[float, ...] = (1.0, 5.0, 15.0),
        recent_events_cache_size: int = 10_000,
        sleep=asyncio.sleep,
    ) -> None:
        self.session_factory = session_factory
        self.clock = clock or LocalClock()
        self.preferences = PreferencesRepository(session_factory, self.clock)
        self.device_tokens = DeviceTokenRepository(session_factory)
        self.inbox = NotificationRepository(session_factory)
        self.sms = SmsChannel(
            session_factory,
            sms_provider,
            clock=self.clock,
            daily_quota=daily_sms_quota,
            max_attempts=sms_max_attempts,
            retry_delays=sms_retry_delays,
            sleep=sleep,
        )
        self.push = PushChannel(push_provider, self.device_tokens, self.preferences)
        self.router = NotificationRouter(self.preferences, self.inbox, self.sms, self.push)
        self.dispatcher = EventDispatcher(self.router, self.inbox, RecentEventCache(recent_events_cache_size))

    async def send_notification(self, params: SendNotificationParams) -> NotificationResult:
        return await self.router.send_notification(params)

    async def dispatch_event(self, event_type: str, payload: dict) -> bool:
        return await self.dispatcher.dispatch(event_type, payload)

    async def send_sms(self, req: SmsRequest) -> SmsResult:
        """Direct SMS: skips preferences, still bound by the daily quota."""

        return await self.sms.send(req)

    async def send_push(self, req: PushRequest) -> PushResult:
        """Direct push to every active device of the farmer."""

        return await self.push.send_to_farmer(req)

    async def _send_on(
        self,
        channel: str,
        farmer_id: str,
        type_name: str,
        title: str,
        body: str,
        variables: dict[str, Any],
        language: str | None,
        phone_number: str | None,
        deeplink: str | None,
    ) -> ChannelSendResult:
        if channel == "sms":
            if not phone_number:
                return ChannelSendResult(channel, False, error="phone number required")
            sms = await self.sms.send(SmsRequest(farmer_id, phone_number, type_name, variables, language))
            return ChannelSendResult(channel, sms.success, id=sms.log_id, error=sms.error)
        if channel == "push":
            critical = is_critical(type_name)
            push = await self.push.send_to_farmer(
                PushRequest(
                    farmer_id=farmer_id,
                    type=type_name,
                    title=title,
                    body=body,
                    deeplink=deeplink,
                    metadata=variables,
                    language=language,
                    high_priority=critical,
                    bypass_quiet_hours=critical,
                )
            )
            error = None if push.success else f"{push.failure_count} device(s) failed"
            return ChannelSendResult(channel, push.success, error=error)
        if channel == "in_app":
            record = self.inbox.create(
                farmer_id=farmer_id,
                type=type_name,
                title=title,
                body=body,
                deeplink=deeplink or default_deeplink(type_name),
                metadata=variables,
            )
            return ChannelSendResult(channel, True, id=record.id)
        return ChannelSendResult(channel, False, error=f"unsupported channel {channel}")

    async def send_templated(
        self,
        farmer_id: str,
        template_type: str,
        channels: list[str],
        variables: dict[str, Any] | None = None,
        language: str | None = None,
        phone_number: str | None = None,
        deeplink: str | None = None,
    ) -> list[ChannelSendResult]:
        """Render one catalog template and send it on each requested channel.

        Preferences are not consulted. A failure on one channel is reported in
        its result and does not stop the others.
        """

        type_name = template_key_name(template_type)
        variables = dict(variables or {})
        title, body = render_push(type_name, language, variables)
        results = []
        for channel in channels:
            try:
                result = await self._send_on(
                    channel, farmer_id, type_name, title, body, variables, language, phone_number, deeplink
                )
            except Exception as exc:
                logger.error("templated_send_failed channel=%s farmer_id=%s error=%s", channel, farmer_id, exc)
                result = ChannelSendResult(channel, False, error=str(exc))
            results.append(result)
        logger.info(
            "templated_notification_sent farmer_id=%s type=%s channels=%s ok=%s",
            farmer_id,
            type_name,
            ",".join(channels),
            sum(result.success for result in results),
        )
        return results

    async def handle_envelope(self, event: EventEnvelope) -> None:
        """Kafka handler; the envelope id wins over any id inside the payload."""

        payload = {"farmer_id": event.aggregate_id, **event.payload, "event_id": event.event_id}
        payload.pop("eventId", None)
        await self.dispatch_event(event.event_type, payload)

    def run_retention(self, notification_days: int, device_token_days: int) -> dict[str, int]:
        """Delete read notifications and inactive device tokens past their age limit."""

        deleted = {
            "farmer_notifications": self.inbox.delete_read_older_than(notification_days),
            "device_tokens": self.device_tokens.delete_inactive_older_than(device_token_days),
        }
        for table, count in deleted.items():
            retention_deleted_total.labels(table=table).inc(count)
        logger.info(
            "retention_run notifications_deleted=%s tokens_deleted=%s",
            deleted["farmer_notifications"],
            deleted["device_tokens"],
        )
        return deleted

    async def retention_loop(self, notification_days: int, device_token_days: int, interval_seconds: float) -> None:
        while True:
            try:
                self.run_retention(notification_days, device_token_days)
            except Exception as exc:
                logger.error("retention_run_failed error=%s", exc)
            await asyncio.sleep(interval_seconds)

    async def start_consumers(self, bootstrap_servers: str, topic: str, group_id: str) -> None:
        """Consume farmer events until cancelled."""

        await consume_forever(bootstrap_servers, topic, group_id, self.handle_envelope)

    @asynccontextmanager
    async def running(self, config: CommonSettings):
        """Run the Kafka consumer and the retention loop for the duration of the block."""

        tasks = [
            asyncio.create_task(
                self.start_consumers(
                    config.kafka_bootstrap_servers,
                    config.events_topic,
                    config.events_consumer_group,
                )
            ),
            asyncio.create_task(
                self.retention_loop(
                    config.notification_retention_days,
                    config.device_token_retention_days,
                    config.retention_interval_seconds,
                )
            ),
        ]
        try:
            yield tasks
        finally:
            for task in tasks:
                task.cancel()
            for outcome in await asyncio.gather(*tasks, return_exceptions=True):
                if isinstance(outcome, Exception):
                    logger.error("background_task_failed error=%s", outcome)


def build_providers(config: CommonSettings) -> tuple[SmsProvider, PushProvider]:
    if config.sms_gateway_url:
        sms: SmsProvider = HttpSmsProvider(config.sms_gateway_url, timeout=config.provider_timeout_seconds)
    else:
        sms = LoggingSmsProvider()
    if config.push_gateway_url:
        push: PushProvider = HttpPushProvider(config.push_gateway_url, timeout=config.provider_timeout_seconds)
    else:
        push = LoggingPushProvider()
    return sms, push


def build_service(config: CommonSettings, session_factory=None) -> NotificationService:
    """Wire the service from settings; `session_factory` overrides the DSN (tests)."""

    sms_provider, push_provider = build_providers(config)
    return NotificationService(
        session_factory or create_session_factory(config.postgres_dsn),
        sms_provider,
        push_provider,
        clock=LocalClock(config.local_timezone),
        daily_sms_quota=config.sms_daily_quota,
        sms_max_attempts=config.sms_max_attempts,
        sms_retry_delays=config.sms_retry_delays_seconds,
        recent_events_cache_size=config.recent_events_cache_size,
    )
