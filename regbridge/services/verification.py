"""
Verification service.
Owns the handle directory, the code ledger and the outbound collaborators
(message dispatcher, registration backend). One instance is built at startup
and injected into routes and bot handlers.
"""
import logging
from typing import Any, Protocol

from fastapi import Request

from regbridge.services.directory import ChatId, HandleDirectory
from regbridge.services.errors import DispatchFailure, NotRegistered, ValidationError
from regbridge.services.handles import normalize_handle
from regbridge.services.ledger import VerificationLedger
from regbridge.services.registrar import Registrar
from regbridge.telegram.templates import (
    registration_congrats_body,
    verification_code_body,
)

logger = logging.getLogger(__name__)


REQUIRED_REGISTRATION_FIELDS = (
    "fullName", "studentId", "email", "phone", "telegram", "login", "password",
)


class Dispatcher(Protocol):
    async def send_text(self, to: ChatId, body: str) -> Any: ...


class VerificationService:
    def __init__(
        self,
        directory: HandleDirectory,
        ledger: VerificationLedger,
        dispatcher: Dispatcher,
        registrar: Registrar,
    ):
        self.directory = directory
        self.ledger = ledger
        self.dispatcher = dispatcher
        self.registrar = registrar

    @property
    def ttl_minutes(self) -> int:
        return int(self.ledger.ttl.total_seconds() // 60)

    # ─── Bot onboarding ──────────────────────────────────────────────────────

    def register_handle(self, handle: str, chat_id: ChatId) -> None:
        self.directory.register(handle, chat_id)

    # ─── Verification codes ──────────────────────────────────────────────────

    async def send_code(self, handle: str | None) -> str:
        """
        Issue a code for a registered handle and deliver it over Telegram.
        If delivery fails the code stays valid; the caller may re-issue.
        """
        if not handle or not handle.strip():
            raise ValidationError("Telegram username is required")

        key = normalize_handle(handle)
        chat_id = self.directory.lookup(key)
        if chat_id is None:
            logger.info("No chat id found for @%s", key)
            raise NotRegistered(
                "Telegram username not found. Please send /start to the bot first"
            )

        code = self.ledger.issue(key)
        logger.info("Issued verification code for @%s (chat %s)", key, chat_id)

        try:
            await self.dispatcher.send_text(to=chat_id, body=verification_code_body(code, self.ttl_minutes))
        except Exception as exc:
            logger.exception("Failed to deliver verification code to @%s", key)
            raise DispatchFailure(f"Failed to send Telegram message: {exc}") from exc

        logger.info("Verification code delivered to @%s", key)
        return code

    def verify_code(self, handle: str | None, code: str | None) -> None:
        if not handle or not handle.strip() or not code:
            raise ValidationError("Telegram username and code are required")

        key = normalize_handle(handle)
        logger.info("Checking verification code for @%s", key)
        self.ledger.verify(key, code)
        logger.info("Verification succeeded for @%s", key)

    # ─── Registration completion ─────────────────────────────────────────────

    async def complete_registration(self, record: dict[str, Any]) -> Any:
        """Validate the record, hand it to the backend and congratulate the user."""
        for field in REQUIRED_REGISTRATION_FIELDS:
            value = record.get(field)
            if not value or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"{field} field is required")

        user_id = await self.registrar.complete(record)
        logger.info("Registration completed for @%s: user id %s",
                    normalize_handle(str(record["telegram"])), user_id)

        chat_id = self.directory.lookup(str(record["telegram"]))
        if chat_id is not None:
            try:
                await self.dispatcher.send_text(
                    to=chat_id,
                    body=registration_congrats_body(str(record["fullName"]), str(record["login"])),
                )
            except Exception:
                logger.exception("Failed to send registration notice to chat %s", chat_id)

        return user_id


def get_service(request: Request) -> VerificationService:
    """FastAPI dependency returning the service built in the app lifespan."""
    return request.app.state.service
