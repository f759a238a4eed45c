"""Notification persistence models (preferences, devices, in-app inbox, SMS log)."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from agrinotify.common.db import Base, JsonType, utc_now


NOTIFICATION_LEVELS = ("ALL", "CRITICAL", "MUTE")
SMS_STATUSES = ("PENDING", "SENT", "DELIVERED", "FAILED")


class FarmerPreferences(Base):
    """One row per farmer; created with defaults on first read."""

    __tablename__ = "farmer_notification_preferences"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    farmer_id: Mapped[str] = mapped_column(String, unique=True, index=True)
    sms_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    push_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    quiet_hours_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    quiet_hours_start: Mapped[str] = mapped_column(String(5), default="22:00")
    quiet_hours_end: Mapped[str] = mapped_column(String(5), default="06:00")
    notification_level: Mapped[str] = mapped_column(String, default="ALL")
    order_updates: Mapped[bool] = mapped_column(Boolean, default=True)
    payment_alerts: Mapped[bool] = mapped_column(Boolean, default=True)
    educational_content: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)


class DeviceToken(Base):
    """Push registration for one farmer device."""

    __tablename__ = "device_tokens"
    __table_args__ = (UniqueConstraint("farmer_id", "token", name="uq_device_token_farmer"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    farmer_id: Mapped[str] = mapped_column(String, index=True)
    token: Mapped[str] = mapped_column(String, index=True)
    device_type: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)


class InAppNotification(Base):
    """Notification-center entry; `event_id` is the durable idempotency key."""

    __tablename__ = "farmer_notifications"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    farmer_id: Mapped[str] = mapped_column(String, index=True)
    type: Mapped[str] = mapped_column(String, index=True)
    title: Mapped[str] = mapped_column(String)
    body: Mapped[str] = mapped_column(Text)
    deeplink: Mapped[str | None] = mapped_column(String, nullable=True)
    # `metadata` is reserved on declarative classes.
    extra: Mapped[dict | None] = mapped_column("metadata", JsonType, nullable=True)
    event_id: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, index=True)


class SmsDeliveryLog(Base):
    """One row per SMS send, updated in place across retries."""

    __tablename__ = "sms_delivery_logs"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    farmer_id: Mapped[str] = mapped_column(String, index=True)
    phone_number: Mapped[str] = mapped_column(String)
    template_key: Mapped[str] = mapped_column(String)
    status: Mapped[str] = mapped_column(String, default="PENDING", index=True)
    retry_count: Mapped[int] = mapped_column(Integer, default=0)
    message_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    error_message: Mapped[str | None] = mapped_column(String, nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, index=True)
