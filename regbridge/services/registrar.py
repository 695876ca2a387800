"""
Registration backend collaborators.
The bridge only forwards a validated record and relays the new user id.
"""
import logging
import time
from typing import Any, Protocol

import httpx

from regbridge.services.errors import RegistrationFailure

logger = logging.getLogger(__name__)


class Registrar(Protocol):
    async def complete(self, record: dict[str, Any]) -> Any: ...


class StubRegistrar:
    """Accepts every record and hands back a millisecond timestamp as the id."""

    async def complete(self, record: dict[str, Any]) -> int:
        return int(time.time() * 1000)


class HttpRegistrar:
    def __init__(
        self,
        url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def complete(self, record: dict[str, Any]) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.url, json=record)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Registration backend call failed: %s", exc)
            raise RegistrationFailure("Registration backend is unavailable") from exc

        user_id = data.get("userId", data.get("id")) if isinstance(data, dict) else None
        if user_id is None:
            logger.error("Registration backend returned no user id: %s", data)
            raise RegistrationFailure("Registration backend returned no user id")
        return user_id
