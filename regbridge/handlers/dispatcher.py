"""
Central dispatcher for incoming Telegram updates.

Parses a raw Bot API Update (from the webhook or from long polling),
extracts the command and routes it to the onboarding handlers.
Anything other than /start and /help is ignored.
"""
import logging

from regbridge.handlers import onboarding
from regbridge.services.verification import VerificationService

logger = logging.getLogger(__name__)


def parse_command(text: str) -> str | None:
    """'/start@MyBot payload' → 'start'"""
    if not text.startswith("/"):
        return None
    command = text.split()[0][1:]
    return command.split("@", 1)[0].lower() or None


async def dispatch(update: dict, service: VerificationService) -> None:
    message = update.get("message")
    if not message:
        logger.debug("Skipping update %s without a message", update.get("update_id"))
        return

    text = message.get("text") or ""
    command = parse_command(text)
    if command is None:
        return

    logger.info("Incoming /%s from chat %s", command, message.get("chat", {}).get("id"))

    if command == "start":
        await onboarding.start(message, service)
    elif command == "help":
        await onboarding.help_command(message, service)
