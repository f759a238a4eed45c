"""Push fan-out to every active device of a farmer."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from agrinotify.common.logging import logger
from agrinotify.common.metrics import channel_deliveries_total, push_invalid_tokens_total
from agrinotify.services.notification.device_tokens import DeviceTokenRepository
from agrinotify.services.notification.preferences import PreferencesRepository
from agrinotify.services.notification.providers import PushProvider, is_invalid_token_error
from agrinotify.templates.catalog import default_deeplink
from agrinotify.templates.renderer import template_key_name


@dataclass
class PushRequest:
    farmer_id: str
    type: str
    title: str
    body: str
    deeplink: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    language: str | None = None
    high_priority: bool = False
    bypass_quiet_hours: bool = False
    notification_id: str | None = None


@dataclass
class PushResult:
    success: bool
    success_count: int = 0
    failure_count: int = 0
    invalid_tokens: list[str] = field(default_factory=list)


def build_message(req: PushRequest) -> dict[str, Any]:
    type_name = template_key_name(req.type)
    data = {
        "type": type_name,
        "deeplink": req.deeplink or default_deeplink(type_name),
        "notification_id": req.notification_id or "",
    }
    data.update({key: "" if value is None else str(value) for key, value in req.metadata.items()})
    return {"title": req.title, "body": req.body, "data": data}


class PushChannel:
    """Sends one push per active token; no retries at this layer."""

    def __init__(
        self,
        provider: PushProvider,
        tokens: DeviceTokenRepository,
        preferences: PreferencesRepository,
    ) -> None:
        self.provider = provider
        self.tokens = tokens
        self.preferences = preferences

    async def send_to_farmer(self, req: PushRequest) -> PushResult:
        if not req.bypass_quiet_hours and self.preferences.is_quiet_hours_active(req.farmer_id):
            logger.info("push_skipped_quiet_hours farmer_id=%s type=%s", req.farmer_id, template_key_name(req.type))
            channel_deliveries_total.labels(channel="push", outcome="quiet_hours").inc()
            return PushResult(success=True)

        tokens = self.tokens.active_tokens(req.farmer_id)
        if not tokens:
            logger.info("push_no_devices farmer_id=%s", req.farmer_id)
            channel_deliveries_total.labels(channel="push", outcome="no_devices").inc()
            return PushResult(success=True)

        message = build_message(req)
        priority = "high" if req.high_priority else "normal"
        outcomes = await asyncio.gather(
            *(self.provider.send(token, message, priority) for token in tokens),
            return_exceptions=True,
        )

        result = PushResult(success=False)
        for token, outcome in zip(tokens, outcomes):
            if not isinstance(outcome, BaseException):
                result.success_count += 1
                continue
            result.failure_count += 1
            if is_invalid_token_error(outcome):
                result.invalid_tokens.append(token)
            else:
                logger.warning("push_send_failed farmer_id=%s token=%s error=%s", req.farmer_id, token[:8], outcome)

        if result.invalid_tokens:
            self.tokens.mark_invalid(result.invalid_tokens)
            push_invalid_tokens_total.inc(len(result.invalid_tokens))
            logger.info(
                "push_tokens_deactivated farmer_id=%s count=%s", req.farmer_id, len(result.invalid_tokens)
            )

        result.success = result.success_count > 0
        channel_deliveries_total.labels(channel="push", outcome="success" if result.success else "failure").inc()
        logger.info(
            "push_sent farmer_id=%s success=%s failure=%s",
            req.farmer_id,
            result.success_count,
            result.failure_count,
        )
        return result
