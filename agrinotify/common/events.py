"""Kafka envelope + consumer helpers.

Upstream marketplace services publish business events (order matched, payment
received, ...) as `EventEnvelope` JSON. Delivery is at-least-once, so every
handler behind `consume_forever` must be idempotent on `event_id`.
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from aiokafka import AIOKafkaConsumer
from pydantic import BaseModel, Field

from agrinotify.common.logging import event_id_ctx, farmer_id_ctx, logger, trace_id_ctx
from agrinotify.common.metrics import event_queue_delay_seconds


class EventEnvelope(BaseModel):
    """Canonical event shape on the inbound topic."""

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: str
    aggregate_id: str
    occurred_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    trace_id: str = Field(default_factory=lambda: str(uuid4()))
    payload: dict[str, Any]


async def make_consumer(bootstrap_servers: str, topic: str, group_id: str) -> AIOKafkaConsumer:
    """Create a configured Kafka consumer for one topic/group."""

    consumer = AIOKafkaConsumer(
        topic,
        bootstrap_servers=bootstrap_servers,
        group_id=group_id,
        auto_offset_reset="earliest",
        enable_auto_commit=False,
    )
    await consumer.start()
    return consumer


def _queue_delay_seconds(event: EventEnvelope) -> float:
    occurred_at = datetime.fromisoformat(event.occurred_at.replace("Z", "+00:00"))
    if occurred_at.tzinfo is None:
        occurred_at = occurred_at.replace(tzinfo=timezone.utc)
    return max(0.0, (datetime.now(timezone.utc) - occurred_at).total_seconds())


async def handle_message(raw: bytes, topic: str, handler) -> None:
    """Parse one raw message and run `handler` with log context bound."""

    event = EventEnvelope(**json.loads(raw.decode("utf-8")))
    event_queue_delay_seconds.labels(topic=topic).observe(_queue_delay_seconds(event))
    trace_token = trace_id_ctx.set(event.trace_id)
    event_token = event_id_ctx.set(event.event_id)
    farmer_token = farmer_id_ctx.set(event.aggregate_id)
    try:
        logger.info(
            "event_received topic=%s event_type=%s farmer_id=%s",
            topic,
            event.event_type,
            event.aggregate_id,
        )
        await handler(event)
    finally:
        trace_id_ctx.reset(trace_token)
        event_id_ctx.reset(event_token)
        farmer_id_ctx.reset(farmer_token)


async def consume_forever(bootstrap_servers: str, topic: str, group_id: str, handler) -> None:
    """Continuously consume one topic and pass parsed envelopes to `handler`.

    Errors in individual messages are logged and processing continues; commit is
    done in batches to keep throughput reasonable.
    """

    while True:
        consumer = None
        try:
            consumer = await make_consumer(bootstrap_servers, topic, group_id)
            while True:
                results = await consumer.getmany(timeout_ms=500, max_records=50)
                for _, messages in results.items():
                    for msg in messages:
                        try:
                            await handle_message(msg.value, topic, handler)
                        except Exception as exc:
                            logger.error(
                                "handler_error topic=%s group=%s offset=%s error=%s",
                                topic,
                                group_id,
                                msg.offset,
                                exc,
                            )
                await consumer.commit()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("consumer_loop_error topic=%s group=%s error=%s", topic, group_id, exc)
            await asyncio.sleep(2)
        finally:
            if consumer is not None:
                await consumer.stop()
            await asyncio.sleep(0)
