"""Smart routing of one notification across SMS, push and the in-app inbox."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import IntegrityError

from agrinotify.common.logging import logger
from agrinotify.common.metrics import inbox_store_failures_total, notifications_total
from agrinotify.common.tracing import tracer
from agrinotify.services.notification.channels.push import PushChannel, PushRequest, PushResult
from agrinotify.services.notification.channels.sms import SmsChannel, SmsRequest, SmsResult
from agrinotify.services.notification.inbox import NotificationRepository
from agrinotify.services.notification.preferences import PreferencesRepository
from agrinotify.templates.catalog import TemplateType
from agrinotify.templates.renderer import template_key_name


CRITICAL_TYPES = frozenset(
    {
        TemplateType.ORDER_MATCHED.value,
        TemplateType.PAYMENT_RECEIVED.value,
        TemplateType.MATCH_EXPIRING.value,
        TemplateType.ORDER_CANCELLED.value,
        TemplateType.QUALITY_DISPUTE.value,
    }
)

TYPE_CATEGORY = {
    TemplateType.PAYMENT_RECEIVED.value: "payment",
    TemplateType.EDUCATIONAL_CONTENT.value: "educational",
}


def category_for(notification_type: str) -> str:
    return TYPE_CATEGORY.get(template_key_name(notification_type), "order")


def is_critical(notification_type: str, force_sms: bool = False) -> bool:
    return force_sms or template_key_name(notification_type) in CRITICAL_TYPES


@dataclass
class SendNotificationParams:
    farmer_id: str
    type: str
    title: str
    body: str
    phone_number: str | None = None
    deeplink: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    language: str | None = None
    force_sms: bool = False
    # SMS template variant when it differs from `type`
    template_key: str | None = None


@dataclass
class NotificationResult:
    success: bool
    notification_id: str | None = None
    sms_success: bool = False
    sms_message_id: str | None = None
    sms_error: str | None = None
    push_success: bool = False
    push_success_count: int = 0
    push_failure_count: int = 0
    error: str | None = None


class DuplicateNotificationError(Exception):
    """Another worker already stored a notification for this event id."""


class NotificationRouter:
    """Decides channels for a notification, stores it, then delivers it.

    Never raises: channel errors end up in the result fields.
    """

    def __init__(
        self,
        preferences: PreferencesRepository,
        inbox: NotificationRepository,
        sms: SmsChannel,
        push: PushChannel,
    ) -> None:
        self.preferences = preferences
        self.inbox = inbox
        self.sms = sms
        self.push = push

    def _store(self, params: SendNotificationParams):
        try:
            return self.inbox.create(
                farmer_id=params.farmer_id,
                type=template_key_name(params.type),
                title=params.title,
                body=params.body,
                deeplink=params.deeplink,
                metadata=params.metadata,
            )
        except IntegrityError as exc:
            if params.metadata.get("event_id"):
                raise DuplicateNotificationError(params.metadata["event_id"]) from exc
            inbox_store_failures_total.inc()
            logger.error("inbox_store_failed farmer_id=%s error=%s", params.farmer_id, exc)
            return None
        except Exception as exc:
            inbox_store_failures_total.inc()
            logger.error("inbox_store_failed farmer_id=%s error=%s", params.farmer_id, exc)
            return None

    async def _skip(self):
        return None

    async def send_notification(self, params: SendNotificationParams) -> NotificationResult:
        type_name = template_key_name(params.type)
        with tracer.start_as_current_span("notification.route") as span:
            span.set_attribute("notification.type", type_name)
            span.set_attribute("farmer.id", params.farmer_id)
            try:
                result = await self._route(params, type_name)
            except DuplicateNotificationError as exc:
                logger.info("duplicate_notification_skipped farmer_id=%s event_id=%s", params.farmer_id, exc)
                result = NotificationResult(success=False, error="duplicate event")
            except Exception as exc:
                logger.exception("notification_route_failed farmer_id=%s type=%s", params.farmer_id, type_name)
                result = NotificationResult(success=False, error=str(exc))
            span.set_attribute("notification.success", result.success)
        notifications_total.labels(type=type_name, outcome="success" if result.success else "failure").inc()
        return result

    async def _route(self, params: SendNotificationParams, type_name: str) -> NotificationResult:
        critical = is_critical(type_name, params.force_sms)
        decision = self.preferences.should_send(params.farmer_id, critical, category_for(type_name))
        logger.info(
            "notification_routing farmer_id=%s type=%s critical=%s sms=%s push=%s",
            params.farmer_id,
            type_name,
            critical,
            decision.sms,
            decision.push,
        )

        record = self._store(params)
        notification_id = record.id if record is not None else None

        sms_call = self._skip()
        if decision.sms and params.phone_number:
            sms_call = self.sms.send(
                SmsRequest(
                    farmer_id=params.farmer_id,
                    phone=params.phone_number,
                    template_key=params.template_key or type_name,
                    params=params.metadata,
                    language=params.language,
                )
            )
        push_call = self._skip()
        if decision.push:
            push_call = self.push.send_to_farmer(
                PushRequest(
                    farmer_id=params.farmer_id,
                    type=type_name,
                    title=params.title,
                    body=params.body,
                    deeplink=params.deeplink,
                    metadata=params.metadata,
                    language=params.language,
                    high_priority=critical,
                    bypass_quiet_hours=critical,
                    notification_id=notification_id,
                )
            )
        sms_outcome, push_outcome = await asyncio.gather(sms_call, push_call, return_exceptions=True)

        result = NotificationResult(success=False, notification_id=notification_id)
        if isinstance(sms_outcome, Exception):
            logger.error("sms_channel_error farmer_id=%s error=%s", params.farmer_id, sms_outcome)
            result.sms_error = str(sms_outcome)
        elif isinstance(sms_outcome, SmsResult):
            result.sms_success = sms_outcome.success
            result.sms_message_id = sms_outcome.message_id
            result.sms_error = sms_outcome.error
        if isinstance(push_outcome, Exception):
            logger.error("push_channel_error farmer_id=%s error=%s", params.farmer_id, push_outcome)
        elif isinstance(push_outcome, PushResult):
            result.push_success = push_outcome.success
            result.push_success_count = push_outcome.success_count
            result.push_failure_count = push_outcome.failure_count

        if critical and not result.sms_success and not result.push_success:
            logger.warning("critical_notification_undelivered farmer_id=%s type=%s", params.farmer_id, type_name)

        result.success = result.sms_success or result.push_success or record is not None
        return result
