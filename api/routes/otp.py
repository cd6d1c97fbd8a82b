"""
api/routes/otp.py -- Diagnostic OTP disclosure endpoints.

Routes:
  GET /api/otps         -- every live OTP record, newest first
  GET /otp/{email}      -- the live code for one email

Both are unauthenticated and hand out valid codes to anyone who asks. They
stand in for the lab's fake mail inbox and are part of the exercise.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.models import OtpLookupResponse, OtpRecordResponse
from auth.dependencies import get_auth_service
from auth.service import AuthService

router = APIRouter()


@router.get("/api/otps", response_model=list[OtpRecordResponse])
def list_otps(service: AuthService = Depends(get_auth_service)) -> list[OtpRecordResponse]:
    return [OtpRecordResponse.from_record(r) for r in service.list_otps()]


@router.get("/otp/{email}", response_model=OtpLookupResponse, response_model_exclude_none=True)
def lookup_otp(email: str, service: AuthService = Depends(get_auth_service)) -> OtpLookupResponse:
    record = service.lookup_otp(email)
    if record is None:
        return OtpLookupResponse(message="No OTP found")
    return OtpLookupResponse(
        email=email,
        otp=record.otp,
        expires_in=f"{service.otp_store.ttl} seconds",
    )
