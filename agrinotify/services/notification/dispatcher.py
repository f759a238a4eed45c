"""Idempotent mapping of upstream business events to routed notifications.

Duplicates are rejected in two tiers: the in-process `RecentEventCache`, then
the durable in-app notification that carries the same `event_id`.
"""

import time
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from agrinotify.common.dedupe import RecentEventCache
from agrinotify.common.logging import logger
from agrinotify.common.metrics import (
    dispatch_latency_seconds,
    duplicate_events_skipped_total,
    events_dispatched_total,
)
from agrinotify.common.tracing import tracer
from agrinotify.services.notification.inbox import NotificationRepository
from agrinotify.services.notification.router import NotificationRouter, SendNotificationParams
from agrinotify.templates.catalog import PUSH_BODIES, PUSH_TITLES, OrderStatus, TemplateType, order_status_key


def _num(value: float) -> str:
    """`50.0` -> `"50"`, `12.5` -> `"12.5"`."""

    return str(int(value)) if float(value).is_integer() else str(value)


class FarmerEvent(BaseModel):
    """Fields shared by every inbound farmer event; accepts camelCase or snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    event_id: str
    farmer_id: str
    order_id: str
    language: str | None = None


class OrderMatchedEvent(FarmerEvent):
    phone_number: str
    crop_name: str
    quantity: float
    price_per_kg: float
    total_amount: float
    buyer_name: str | None = None
    expires_at: str | None = None


class PaymentReceivedEvent(FarmerEvent):
    phone_number: str
    crop_name: str
    amount: float
    upi_id: str
    transaction_id: str | None = None


class MatchExpiringEvent(FarmerEvent):
    phone_number: str
    crop_name: str
    hours_remaining: float


class OrderCancelledEvent(FarmerEvent):
    phone_number: str
    crop_name: str
    reason: str


class HaulerEnRouteEvent(FarmerEvent):
    hauler_name: str
    hauler_phone: str | None = None
    eta_minutes: int


class PickupCompleteEvent(FarmerEvent):
    crop_name: str
    quantity: float
    drop_point_name: str


class OrderDeliveredEvent(FarmerEvent):
    crop_name: str
    quantity: float
    drop_point_name: str | None = None


class DropPointAssignedEvent(FarmerEvent):
    drop_point_name: str
    drop_point_address: str
    time_window_start: str
    time_window_end: str


class DropPointChangedEvent(DropPointAssignedEvent):
    phone_number: str
    old_drop_point_name: str
    change_reason: str


class MatchAcceptedEvent(FarmerEvent):
    phone_number: str
    crop_name: str
    quantity: float
    price_per_kg: float
    total_amount: float
    delivery_date: str | None = None


class OrderStatusChangedEvent(FarmerEvent):
    phone_number: str
    crop_name: str
    quantity: float
    total_amount: float
    new_status: OrderStatus
    previous_status: OrderStatus | None = None
    hauler_name: str | None = None
    hauler_phone: str | None = None
    eta: str | None = None
    upi_transaction_id: str | None = None


class OrderDelayedEvent(FarmerEvent):
    phone_number: str
    crop_name: str
    delay_minutes: int
    reason: str
    new_eta: str | None = None


def _params(
    event: FarmerEvent,
    notification_type: TemplateType,
    deeplink: str,
    metadata: dict[str, Any],
    phone_number: str | None = None,
    force_sms: bool = False,
    template_key: str | None = None,
) -> SendNotificationParams:
    metadata = {"event_id": event.event_id, "order_id": event.order_id, **metadata}
    return SendNotificationParams(
        farmer_id=event.farmer_id,
        type=notification_type.value,
        title=PUSH_TITLES.render(template_key or notification_type, event.language, metadata),
        body=PUSH_BODIES.render(notification_type, event.language, metadata),
        phone_number=phone_number,
        deeplink=deeplink,
        metadata=metadata,
        language=event.language,
        force_sms=force_sms,
        template_key=template_key,
    )


def order_matched(event: OrderMatchedEvent) -> SendNotificationParams:
    return _params(
        event,
        TemplateType.ORDER_MATCHED,
        f"/match-details/{event.order_id}",
        {
            "crop_name": event.crop_name,
            "quantity_kg": _num(event.quantity),
            "price_per_kg": _num(event.price_per_kg),
            "total_amount": _num(event.total_amount),
        },
        phone_number=event.phone_number,
    )


def payment_received(event: PaymentReceivedEvent) -> SendNotificationParams:
    return _params(
        event,
        TemplateType.PAYMENT_RECEIVED,
        "/earnings",
        {"crop_name": event.crop_name, "amount": _num(event.amount), "upi_id": event.upi_id},
        phone_number=event.phone_number,
    )


def match_expiring(event: MatchExpiringEvent) -> SendNotificationParams:
    return _params(
        event,
        TemplateType.MATCH_EXPIRING,
        f"/match-details/{event.order_id}",
        {"crop_name": event.crop_name, "hours": _num(event.hours_remaining)},
        phone_number=event.phone_number,
    )


def order_cancelled(event: OrderCancelledEvent) -> SendNotificationParams:
    return _params(
        event,
        TemplateType.ORDER_CANCELLED,
        f"/orders/{event.order_id}",
        {"crop_name": event.crop_name, "reason": event.reason},
        phone_number=event.phone_number,
        force_sms=True,
    )


def hauler_en_route(event: HaulerEnRouteEvent) -> SendNotificationParams:
    return _params(
        event,
        TemplateType.HAULER_EN_ROUTE,
        f"/orders/{event.order_id}",
        {"hauler_name": event.hauler_name, "eta_minutes": str(event.eta_minutes)},
    )


def pickup_complete(event: PickupCompleteEvent) -> SendNotificationParams:
    return _params(
        event,
        TemplateType.PICKUP_COMPLETE,
        f"/orders/{event.order_id}",
        {
            "crop_name": event.crop_name,
            "quantity_kg": _num(event.quantity),
            "drop_point_name": event.drop_point_name,
        },
    )


def order_delivered(event: OrderDeliveredEvent) -> SendNotificationParams:
    return _params(
        event,
        TemplateType.DELIVERED,
        f"/orders/{event.order_id}",
        {"crop_name": event.crop_name, "quantity_kg": _num(event.quantity)},
    )


def drop_point_assigned(event: DropPointAssignedEvent) -> SendNotificationParams:
    return _params(
        event,
        TemplateType.DROP_POINT_ASSIGNMENT,
        "/drop-point",
        {
            "drop_point_name": event.drop_point_name,
            "drop_point_address": event.drop_point_address,
            "time_window": f"{event.time_window_start} - {event.time_window_end}",
        },
    )


def drop_point_changed(event: DropPointChangedEvent) -> SendNotificationParams:
    return _params(
        event,
        TemplateType.DROP_POINT_CHANGE,
        "/drop-point?changed=true",
        {
            "drop_point_name": event.drop_point_name,
            "drop_point_address": event.drop_point_address,
            "old_drop_point_name": event.old_drop_point_name,
            "change_reason": event.change_reason,
            "time_window": f"{event.time_window_start} - {event.time_window_end}",
        },
        phone_number=event.phone_number,
        force_sms=True,
    )


def match_accepted(event: MatchAcceptedEvent) -> SendNotificationParams:
    return _params(
        event,
        TemplateType.ORDER_CONFIRMATION,
        f"/orders/{event.order_id}",
        {
            "crop_name": event.crop_name,
            "quantity_kg": _num(event.quantity),
            "price_per_kg": _num(event.price_per_kg),
            "total_amount": _num(event.total_amount),
            "delivery_date": event.delivery_date or "TBD",
        },
        phone_number=event.phone_number,
        force_sms=True,
    )


def order_status_changed(event: OrderStatusChangedEvent) -> SendNotificationParams:
    """One SMS variant and push title per tracking status; always texted."""

    return _params(
        event,
        TemplateType.ORDER_STATUS_UPDATE,
        f"/orders/{event.order_id}",
        {
            "crop_name": event.crop_name,
            "quantity_kg": _num(event.quantity),
            "total_amount": _num(event.total_amount),
            "status": event.new_status.value,
            "previous_status": event.previous_status.value if event.previous_status else None,
            "hauler_name": event.hauler_name or "Driver",
            "hauler_phone": event.hauler_phone,
            "eta": event.eta or "tomorrow 9AM",
            "upi_transaction_id": event.upi_transaction_id or "N/A",
        },
        phone_number=event.phone_number,
        force_sms=True,
        template_key=order_status_key(event.new_status),
    )


def order_delayed(event: OrderDelayedEvent) -> SendNotificationParams:
    return _params(
        event,
        TemplateType.ORDER_DELAYED,
        f"/orders/{event.order_id}",
        {
            "crop_name": event.crop_name,
            "delay_minutes": str(event.delay_minutes),
            "reason": event.reason,
            "new_eta": event.new_eta or "TBD",
        },
        phone_number=event.phone_number,
        force_sms=True,
    )


EVENT_HANDLERS: dict[str, tuple[type[FarmerEvent], Callable[[Any], SendNotificationParams]]] = {
    "ORDER_MATCHED": (OrderMatchedEvent, order_matched),
    "PAYMENT_RECEIVED": (PaymentReceivedEvent, payment_received),
    "MATCH_EXPIRING": (MatchExpiringEvent, match_expiring),
    "ORDER_CANCELLED": (OrderCancelledEvent, order_cancelled),
    "HAULER_EN_ROUTE": (HaulerEnRouteEvent, hauler_en_route),
    "PICKUP_COMPLETE": (PickupCompleteEvent, pickup_complete),
    "ORDER_DELIVERED": (OrderDeliveredEvent, order_delivered),
    "DROP_POINT_ASSIGNED": (DropPointAssignedEvent, drop_point_assigned),
    "DROP_POINT_CHANGED": (DropPointChangedEvent, drop_point_changed),
    "MATCH_ACCEPTED": (MatchAcceptedEvent, match_accepted),
    "ORDER_STATUS_CHANGED": (OrderStatusChangedEvent, order_status_changed),
    "ORDER_DELAYED": (OrderDelayedEvent, order_delayed),
}


class EventDispatcher:
    """Turns each upstream event into at most one routed notification."""

    def __init__(
        self,
        router: NotificationRouter,
        inbox: NotificationRepository,
        recent: RecentEventCache | None = None,
    ) -> None:
        self.router = router
        self.inbox = inbox
        self.recent = recent or RecentEventCache()

    def _durably_processed(self, event_id: str) -> bool:
        try:
            return self.inbox.find_by_event_id(event_id) is not None
        except Exception as exc:
            logger.warning("durable_dedupe_lookup_failed event_id=%s error=%s", event_id, exc)
            return False

    def _record(self, event_type: str, result: str) -> None:
        events_dispatched_total.labels(event_type=event_type, result=result).inc()

    async def dispatch(self, event_type: str, payload: dict[str, Any]) -> bool:
        handler = EVENT_HANDLERS.get(event_type)
        if handler is None:
            logger.warning("unknown_event_type event_type=%s", event_type)
            self._record("UNKNOWN", "unknown_type")
            return False
        model, build = handler

        try:
            event = model.model_validate(payload)
        except ValidationError as exc:
            logger.warning("invalid_event_payload event_type=%s errors=%s", event_type, exc.errors())
            self._record(event_type, "invalid")
            return False

        if not self.recent.claim(event.event_id):
            logger.info("duplicate_event_skipped tier=memory event_id=%s", event.event_id)
            duplicate_events_skipped_total.labels(tier="memory").inc()
            self._record(event_type, "duplicate")
            return False
        if self._durably_processed(event.event_id):
            self.recent.mark_processed(event.event_id)
            logger.info("duplicate_event_skipped tier=durable event_id=%s", event.event_id)
            duplicate_events_skipped_total.labels(tier="durable").inc()
            self._record(event_type, "duplicate")
            return False

        logger.info(
            "event_dispatching event_type=%s event_id=%s farmer_id=%s order_id=%s",
            event_type,
            event.event_id,
            event.farmer_id,
            event.order_id,
        )
        start = time.perf_counter()
        try:
            with tracer.start_as_current_span("notification.dispatch") as span:
                span.set_attribute("event.type", event_type)
                span.set_attribute("event.id", event.event_id)
                result = await self.router.send_notification(build(event))
        except Exception:
            self.recent.release(event.event_id)
            logger.exception("event_dispatch_failed event_type=%s event_id=%s", event_type, event.event_id)
            self._record(event_type, "error")
            return False
        finally:
            dispatch_latency_seconds.labels(event_type=event_type).observe(time.perf_counter() - start)

        self.recent.mark_processed(event.event_id)
        self._record(event_type, "success" if result.success else "failure")
        logger.info(
            "event_dispatched event_type=%s event_id=%s success=%s", event_type, event.event_id, result.success
        )
        return result.success
