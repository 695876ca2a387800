"""
Registration completion endpoint.
Forwards the student record to the registration backend.
"""
from typing import Any

from fastapi import APIRouter, Body, Depends

from regbridge.services.verification import VerificationService, get_service

router = APIRouter(prefix="/api", tags=["register"])


@router.post("/register")
async def register(
    record: dict[str, Any] = Body(...),
    service: VerificationService = Depends(get_service),
):
    user_id = await service.complete_registration(record)
    return {"success": True, "userId": user_id}
