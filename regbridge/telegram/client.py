"""
Telegram Bot API client.
Handles all outbound calls to api.telegram.org.
"""
import hmac
import logging
from typing import Any

import httpx

from regbridge.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class TelegramClient:
    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token if token is not None else settings.telegram_bot_token
        self.base_url = (base_url or settings.telegram_api_base).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.telegram_timeout_seconds
        self._transport = transport

    # ─── Low-level caller ────────────────────────────────────────────────────

    async def _call(self, method: str, payload: dict, timeout: float | None = None) -> Any:
        url = f"{self.base_url}/bot{self.token}/{method}"
        async with httpx.AsyncClient(
            timeout=timeout or self.timeout, transport=self._transport
        ) as client:
            resp = await client.post(url, json=payload)
        if resp.status_code != 200:
            logger.error("Telegram API error %s on %s: %s", resp.status_code, method, resp.text)
        resp.raise_for_status()
        data = resp.json()
        if not data.get("ok"):
            raise httpx.HTTPError(f"Telegram {method} failed: {data.get('description')}")
        return data.get("result")

    # ─── Messages ────────────────────────────────────────────────────────────

    async def send_text(self, to: int | str, body: str) -> dict:
        """Send a plain text message to a chat."""
        return await self._call("sendMessage", {"chat_id": to, "text": body})

    # ─── Updates (long polling) ──────────────────────────────────────────────

    async def get_updates(self, offset: int | None = None, timeout: int = 30) -> list[dict]:
        payload: dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        # The HTTP timeout must outlast Telegram's long-poll hold.
        return await self._call("getUpdates", payload, timeout=timeout + self.timeout)

    # ─── Webhook management ──────────────────────────────────────────────────

    async def set_webhook(self, url: str, secret_token: str = "") -> bool:
        payload: dict[str, Any] = {"url": url, "allowed_updates": ["message"]}
        if secret_token:
            payload["secret_token"] = secret_token
        return await self._call("setWebhook", payload)

    async def delete_webhook(self) -> bool:
        return await self._call("deleteWebhook", {})

    # ─── Webhook secret verification ─────────────────────────────────────────

    @staticmethod
    def verify_secret_token(received: str) -> bool:
        """Compare the X-Telegram-Bot-Api-Secret-Token header with our secret."""
        return hmac.compare_digest(settings.telegram_webhook_secret.encode(), received.encode())


# Singleton instance
tg_client = TelegramClient()
