"""
Long-polling loop for deployments without a public webhook URL.
Fetches updates with getUpdates and hands each one to the dispatcher.
"""
import asyncio
import logging

from regbridge.handlers.dispatcher import dispatch
from regbridge.services.verification import VerificationService
from regbridge.telegram.client import TelegramClient

logger = logging.getLogger(__name__)

RETRY_DELAY_SECONDS = 5


async def poll_once(
    client: TelegramClient,
    service: VerificationService,
    offset: int | None = None,
    timeout: int = 30,
) -> int | None:
    """Process one batch of updates and return the next offset."""
    updates = await client.get_updates(offset=offset, timeout=timeout)
    for update in updates:
        offset = update["update_id"] + 1
        try:
            await dispatch(update, service)
        except Exception as exc:
            logger.exception("Error dispatching update %s: %s", update.get("update_id"), exc)
    return offset


async def run_polling(client: TelegramClient, service: VerificationService) -> None:
    offset = None
    webhook_cleared = False
    while True:
        try:
            if not webhook_cleared:
                # A webhook left registered would make getUpdates fail with 409.
                await client.delete_webhook()
                webhook_cleared = True
                logger.info("Telegram bot polling started")
            offset = await poll_once(client, service, offset)
        except Exception as exc:
            logger.warning("Telegram polling failed, retrying in %ss: %s", RETRY_DELAY_SECONDS, exc)
            await asyncio.sleep(RETRY_DELAY_SECONDS)
