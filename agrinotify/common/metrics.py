"""Prometheus metric definitions for the notification service."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


notifications_total = Counter(
    "notifications_total",
    "Notifications routed, by type and overall outcome",
    ["type", "outcome"],
)
channel_deliveries_total = Counter(
    "channel_deliveries_total",
    "Per-channel delivery outcomes",
    ["channel", "outcome"],
)
sms_attempts_total = Counter("sms_attempts_total", "SMS provider attempts", ["outcome"])
sms_quota_rejections_total = Counter("sms_quota_rejections_total", "SMS sends rejected by daily quota")
retries_total = Counter("retries_total", "Retry count", ["dependency"])
push_invalid_tokens_total = Counter("push_invalid_tokens_total", "Device tokens deactivated as invalid")
inbox_store_failures_total = Counter("inbox_store_failures_total", "In-app notification writes that failed")
events_dispatched_total = Counter(
    "events_dispatched_total",
    "Inbound events by type and dispatch result",
    ["event_type", "result"],
)
duplicate_events_skipped_total = Counter(
    "duplicate_events_skipped_total",
    "Duplicate inbound events skipped",
    ["tier"],
)
dispatch_latency_seconds = Histogram(
    "dispatch_latency_seconds",
    "Time from event dispatch to routed result",
    ["event_type"],
)
event_queue_delay_seconds = Histogram(
    "event_queue_delay_seconds",
    "Event queue delay seconds between occurred_at and consume time",
    ["topic"],
)
retention_deleted_total = Counter(
    "retention_deleted_total",
    "Rows removed by the retention job",
    ["table"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
