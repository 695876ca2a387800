"""
Verification code API used by the registration website.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from regbridge.services.verification import VerificationService, get_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class SendCodeRequest(BaseModel):
    telegram: str | None = None


class VerifyCodeRequest(BaseModel):
    telegram: str | None = None
    code: str | None = None


@router.post("/send-verification-code")
async def send_verification_code(
    body: SendCodeRequest,
    service: VerificationService = Depends(get_service),
):
    """Issue a code for the handle and send it to the user's Telegram chat."""
    await service.send_code(body.telegram)
    return {"success": True}


@router.post("/verify-code")
async def verify_code(
    body: VerifyCodeRequest,
    service: VerificationService = Depends(get_service),
):
    service.verify_code(body.telegram, body.code)
    return {"success": True}
