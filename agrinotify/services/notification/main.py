"""Notification service process entrypoint.

Run with `uvicorn agrinotify.services.notification.main:app`.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from agrinotify.common.config import settings
from agrinotify.common.db import create_tables
from agrinotify.common.logging import configure_logging
from agrinotify.common.startup import log_startup_config
from agrinotify.common.tracing import instrument_app, setup_tracing
from agrinotify.services.notification.api import create_app
from agrinotify.services.notification.service import build_service

configure_logging(settings.service_name, settings.log_level)
setup_tracing(settings.service_name, settings.otel_exporter_otlp_endpoint)
log_startup_config(
    settings.service_name,
    settings,
    [
        "postgres_dsn",
        "kafka_bootstrap_servers",
        "events_topic",
        "events_consumer_group",
        "local_timezone",
        "sms_daily_quota",
        "sms_gateway_url",
        "push_gateway_url",
    ],
)
service = build_service(settings)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Run the event consumer and retention loop with the application lifecycle."""

    create_tables(service.session_factory)
    async with service.running(settings):
        yield


app = create_app(service, lifespan=lifespan)
instrument_app(app)
