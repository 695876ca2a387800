"""
Bot onboarding: /start links the sender's username to their chat id.
"""
import logging

from regbridge.services.verification import VerificationService
from regbridge.telegram.templates import HELP_TEXT, NO_USERNAME_TEXT, welcome_body

logger = logging.getLogger(__name__)


async def start(message: dict, service: VerificationService) -> None:
    sender = message.get("from") or {}
    chat_id = message["chat"]["id"]
    username = sender.get("username")

    if not username:
        logger.info("Chat %s started the bot without a username", chat_id)
        await service.dispatcher.send_text(to=chat_id, body=NO_USERNAME_TEXT)
        return

    service.register_handle(username, chat_id)
    await service.dispatcher.send_text(to=chat_id, body=welcome_body(sender.get("first_name")))


async def help_command(message: dict, service: VerificationService) -> None:
    await service.dispatcher.send_text(to=message["chat"]["id"], body=HELP_TEXT)
