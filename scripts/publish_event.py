"""Publish one farmer event envelope to the notification topic.

Useful for manual end-to-end checks and duplicate-event testing (pass the same
`--event-id` twice).
"""

import argparse
import asyncio
import json
from pathlib import Path

from aiokafka import AIOKafkaProducer

from agrinotify.common.events import EventEnvelope


async def publish(bootstrap_servers: str, topic: str, envelope: EventEnvelope) -> None:
    """Open producer, publish one envelope, close producer."""

    producer = AIOKafkaProducer(bootstrap_servers=bootstrap_servers)
    await producer.start()
    try:
        await producer.send_and_wait(
            topic,
            envelope.model_dump_json().encode("utf-8"),
            key=envelope.aggregate_id.encode("utf-8"),
        )
    finally:
        await producer.stop()


def main() -> None:
    """Parse CLI args and publish one event."""

    parser = argparse.ArgumentParser(description="Publish a farmer notification event to Kafka.")
    parser.add_argument("--bootstrap-servers", default="localhost:9092")
    parser.add_argument("--topic", default="farmer.notification.events")
    parser.add_argument("--event-type", required=True, help="e.g. ORDER_MATCHED, PAYMENT_RECEIVED")
    parser.add_argument("--farmer-id", required=True)
    parser.add_argument("--event-id", default=None, help="Reuse to simulate redelivery")
    parser.add_argument("--json", dest="json_inline", default=None, help="Inline JSON payload")
    parser.add_argument("--file", dest="json_file", default=None, help="Path to JSON payload file")
    args = parser.parse_args()

    if bool(args.json_inline) == bool(args.json_file):
        raise SystemExit("Provide exactly one of --json or --file")

    if args.json_inline:
        payload = json.loads(args.json_inline)
    else:
        payload = json.loads(Path(args.json_file).read_text())

    fields = {"event_type": args.event_type, "aggregate_id": args.farmer_id, "payload": payload}
    if args.event_id:
        fields["event_id"] = args.event_id
    envelope = EventEnvelope(**fields)

    asyncio.run(publish(args.bootstrap_servers, args.topic, envelope))
    print(f"Published event_id={envelope.event_id} type={envelope.event_type} to topic={args.topic}")


if __name__ == "__main__":
    main()
