"""SMS and push provider capabilities.

Channels only see the `SmsProvider` / `PushProvider` protocols. The HTTP
implementations talk to a gateway over httpx; the logging implementations are
used when no gateway is configured (local runs, demos).
"""

from dataclasses import dataclass
from typing import Any, Protocol
from uuid import uuid4

import httpx

from agrinotify.common.logging import logger, mask_phone


INVALID_TOKEN_CODES = (
    "messaging/invalid-registration-token",
    "messaging/registration-token-not-registered",
    "messaging/invalid-argument",
)


class ProviderError(Exception):
    """Delivery attempt failed; may succeed on retry."""


class InvalidTokenError(ProviderError):
    """Push token permanently rejected by the provider."""


@dataclass(frozen=True)
class ProviderReceipt:
    message_id: str


class SmsProvider(Protocol):
    async def send(self, phone: str, text: str) -> ProviderReceipt: ...


class PushProvider(Protocol):
    async def send(self, token: str, message: dict[str, Any], priority: str) -> ProviderReceipt: ...


def is_invalid_token_error(error: BaseException) -> bool:
    if isinstance(error, InvalidTokenError):
        return True
    text = str(error)
    return any(code in text for code in INVALID_TOKEN_CODES)


class _HttpGateway:
    def __init__(self, base_url: str, timeout: float = 5.0, client: httpx.AsyncClient | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = client

    async def _post(self, path: str, payload: dict) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            if self.client is not None:
                return await self.client.post(url, json=payload, timeout=self.timeout)
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise ProviderError(f"gateway unreachable: {exc}") from exc

    @staticmethod
    def _receipt(resp: httpx.Response) -> ProviderReceipt:
        try:
            body = resp.json()
        except ValueError:
            body = {}
        message_id = body.get("message_id") or body.get("id") or str(uuid4())
        return ProviderReceipt(message_id=str(message_id))


class HttpSmsProvider(_HttpGateway):
    """Posts `{to, text}` to `<gateway>/sms`."""

    async def send(self, phone: str, text: str) -> ProviderReceipt:
        resp = await self._post("/sms", {"to": phone, "text": text})
        if resp.status_code >= 400:
            raise ProviderError(f"sms gateway status={resp.status_code} body={resp.text[:200]}")
        return self._receipt(resp)


class HttpPushProvider(_HttpGateway):
    """Posts `{token, priority, message}` to `<gateway>/push`.

    A token is only reported invalid on 410 Gone or an invalid-token error code
    in the body; a bare 404 can mean a misrouted gateway and stays retryable.
    """

    async def send(self, token: str, message: dict[str, Any], priority: str) -> ProviderReceipt:
        resp = await self._post("/push", {"token": token, "priority": priority, "message": message})
        if resp.status_code == 410:
            raise InvalidTokenError(f"messaging/registration-token-not-registered status={resp.status_code}")
        if resp.status_code >= 400:
            error = resp.text[:200]
            if any(code in error for code in INVALID_TOKEN_CODES):
                raise InvalidTokenError(error)
            raise ProviderError(f"push gateway status={resp.status_code} body={error}")
        return self._receipt(resp)


class LoggingSmsProvider:
    """Accepts every message and only logs it."""

    async def send(self, phone: str, text: str) -> ProviderReceipt:
        message_id = f"log-{uuid4()}"
        logger.info("sms_logged phone=%s message_id=%s chars=%s", mask_phone(phone), message_id, len(text))
        return ProviderReceipt(message_id=message_id)


class LoggingPushProvider:
    async def send(self, token: str, message: dict[str, Any], priority: str) -> ProviderReceipt:
        message_id = f"log-{uuid4()}"
        logger.info(
            "push_logged token=%s priority=%s title=%s message_id=%s",
            token[:8],
            priority,
            message.get("title"),
            message_id,
        )
        return ProviderReceipt(message_id=message_id)
