"""
Webhook router – receives updates pushed by the Telegram Bot API.
POST /telegram/webhook
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from regbridge.config import get_settings
from regbridge.handlers.dispatcher import dispatch
from regbridge.services.verification import VerificationService, get_service
from regbridge.telegram.client import TelegramClient

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/telegram", tags=["telegram"])


@router.post("/webhook")
async def receive_update(request: Request, service: VerificationService = Depends(get_service)):
    """
    Verifies the secret token header (skipped when no secret is configured),
    then dispatches the update to the bot handlers.
    """
    if settings.telegram_webhook_secret:
        received = request.headers.get("X-Telegram-Bot-Api-Secret-Token", "")
        if not TelegramClient.verify_secret_token(received):
            logger.warning("Invalid webhook secret – update rejected.")
            raise HTTPException(status_code=403, detail="Invalid secret token")

    update = await request.json()
    # Always answer 200 so Telegram doesn't redeliver the update
    try:
        await dispatch(update, service)
    except Exception as exc:
        logger.exception("Error dispatching update: %s", exc)

    return {"status": "ok"}
