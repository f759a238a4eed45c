"""Shared fixtures: in-memory database, pinned clock and fake providers."""

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agrinotify.common.clock import FixedClock
from agrinotify.common.db import Base
from agrinotify.services.notification import models  # noqa: F401
from agrinotify.services.notification.providers import InvalidTokenError, ProviderError, ProviderReceipt
from agrinotify.services.notification.service import NotificationService


class FakeSmsProvider:
    """Fails the first `failures` calls, then accepts."""

    def __init__(self, failures: int = 0, error: str = "gateway timeout") -> None:
        self.failures = failures
        self.error = error
        self.calls = 0
        self.sent: list[tuple[str, str]] = []

    async def send(self, phone: str, text: str) -> ProviderReceipt:
        self.calls += 1
        if self.calls <= self.failures:
            raise ProviderError(self.error)
        self.sent.append((phone, text))
        return ProviderReceipt(message_id=f"sms-{self.calls}")


class FakePushProvider:
    def __init__(self, invalid=(), failing=()) -> None:
        self.invalid = set(invalid)
        self.failing = set(failing)
        self.sent: list[tuple[str, dict, str]] = []

    async def send(self, token: str, message: dict, priority: str) -> ProviderReceipt:
        self.sent.append((token, message, priority))
        if token in self.invalid:
            raise InvalidTokenError("messaging/registration-token-not-registered")
        if token in self.failing:
            raise ProviderError("push service unavailable")
        return ProviderReceipt(message_id=f"push-{token}")


@pytest.fixture
def session_factory():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def clock():
    """10:00 in Bengaluru: outside the default 22:00-06:00 quiet window."""

    return FixedClock(datetime(2026, 10, 17, 10, 0))


@pytest.fixture
def sms_provider():
    return FakeSmsProvider()


@pytest.fixture
def push_provider():
    return FakePushProvider()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def service(session_factory, sms_provider, push_provider, clock, sleeps):
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return NotificationService(session_factory, sms_provider, push_provider, clock=clock, sleep=fake_sleep)
