"""API request/response schemas for notification endpoints."""

from typing import Any, Literal

from pydantic import BaseModel, Field


HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class SendNotificationRequest(BaseModel):
    """Payload accepted by `POST /notifications/send`."""

    farmer_id: str = Field(min_length=1)
    type: str = Field(min_length=1)
    title: str
    body: str
    phone_number: str | None = None
    deeplink: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    language: str | None = None
    force_sms: bool = False
    template_key: str | None = None


class NotificationResultResponse(BaseModel):
    success: bool
    notification_id: str | None = None
    sms_success: bool = False
    sms_message_id: str | None = None
    sms_error: str | None = None
    push_success: bool = False
    push_success_count: int = 0
    push_failure_count: int = 0
    error: str | None = None


class DispatchEventRequest(BaseModel):
    """Payload accepted by `POST /events`."""

    event_type: str = Field(min_length=1)
    payload: dict[str, Any]


class DispatchEventResponse(BaseModel):
    processed: bool


class PreferencesUpdateRequest(BaseModel):
    """Partial preferences update; omitted or null fields keep their value."""

    sms_enabled: bool | None = None
    push_enabled: bool | None = None
    quiet_hours_enabled: bool | None = None
    quiet_hours_start: str | None = Field(default=None, pattern=HHMM_PATTERN)
    quiet_hours_end: str | None = Field(default=None, pattern=HHMM_PATTERN)
    notification_level: Literal["ALL", "CRITICAL", "MUTE"] | None = None
    order_updates: bool | None = None
    payment_alerts: bool | None = None
    educational_content: bool | None = None


class PreferencesResponse(BaseModel):
    farmer_id: str
    sms_enabled: bool
    push_enabled: bool
    quiet_hours_enabled: bool
    quiet_hours_start: str
    quiet_hours_end: str
    notification_level: str
    order_updates: bool
    payment_alerts: bool
    educational_content: bool

    model_config = {"from_attributes": True}


class DeviceRegisterRequest(BaseModel):
    token: str = Field(min_length=1)
    device_type: str | None = None


class DeviceUnregisterRequest(BaseModel):
    token: str = Field(min_length=1)


class SmsStatsResponse(BaseModel):
    today: int
    today_delivered: int
    today_failed: int
    remaining: int


class SmsSendRequest(BaseModel):
    """Payload accepted by `POST /sms/send`."""

    farmer_id: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)
    template_key: str = Field(min_length=1)
    variables: dict[str, Any] = Field(default_factory=dict)
    language: str | None = None


class SmsSendResponse(BaseModel):
    success: bool
    message_id: str | None = None
    log_id: str | None = None
    error: str | None = None


class PushSendRequest(BaseModel):
    """Payload accepted by `POST /push/send`."""

    farmer_id: str = Field(min_length=1)
    title: str
    body: str
    type: str = "GENERAL"
    deeplink: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    high_priority: bool = False


class PushSendResponse(BaseModel):
    success: bool
    success_count: int = 0
    failure_count: int = 0
    invalid_tokens: list[str] = Field(default_factory=list)


class TemplatedSendRequest(BaseModel):
    """Payload accepted by `POST /notifications/send-templated`."""

    farmer_id: str = Field(min_length=1)
    template_type: str = Field(min_length=1)
    channels: list[Literal["sms", "push", "in_app"]] = Field(min_length=1)
    variables: dict[str, Any] = Field(default_factory=dict)
    language: str | None = None
    phone_number: str | None = None
    deeplink: str | None = None


class ChannelSendResponse(BaseModel):
    channel: str
    success: bool
    id: str | None = None
    error: str | None = None


class TemplatedSendResponse(BaseModel):
    results: list[ChannelSendResponse]
