"""
api/routes/auth.py -- OTP, registration, login and session endpoints.

Routes:
  POST /api/send-otp    -- issue a fresh OTP for an email (code is not returned)
  POST /api/verify-otp  -- check a code; marks the email verified in the session
  POST /api/register    -- create an account for the verified email; logs it in
  POST /api/login       -- password login; sets the session user
  GET  /api/user        -- current session user (401 when anonymous)
  POST /api/logout      -- destroy the session

Wrong codes and wrong passwords answer 200 with success:false, never an
error status. Handlers that hash or hit the database are plain `def` so
FastAPI runs them in the thread pool.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.models import (
    CurrentUserResponse,
    LoginRequest,
    RegisterRequest,
    SendOtpRequest,
    SuccessResponse,
    VerifyOtpRequest,
)
from auth.dependencies import get_auth_service, get_current_user, get_session
from auth.models import SessionUser
from auth.service import AuthService
from auth.session import SessionState

# Auth policy:
# - POST /api/send-otp, /api/verify-otp, /api/register, /api/login: public
# - POST /api/logout: public -- destroying an empty session is a no-op
# - GET  /api/user: requires a session user (get_current_user)
router = APIRouter()


@router.post("/send-otp", response_model=SuccessResponse, response_model_exclude_none=True)
def send_otp(body: SendOtpRequest, service: AuthService = Depends(get_auth_service)) -> SuccessResponse:
    """Issue a new OTP for the email, replacing any earlier one."""
    service.issue_otp(body.email)
    return SuccessResponse(success=True, message="OTP sent successfully")


@router.post("/verify-otp", response_model=SuccessResponse, response_model_exclude_none=True)
def verify_otp(
    body: VerifyOtpRequest,
    session: SessionState = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    if service.verify_otp(session, body.email, body.otp):
        return SuccessResponse(success=True)
    return SuccessResponse(success=False, message="Invalid OTP")


@router.post("/register", response_model=SuccessResponse, response_model_exclude_none=True)
def register(
    body: RegisterRequest,
    session: SessionState = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    """Complete registration. 400 {"error": "Email not verified"} unless the
    session verified this exact email via /api/verify-otp."""
    service.register(
        session,
        body.email,
        body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        address=body.address,
        city=body.city,
        zip_code=body.zip_code,
    )
    return SuccessResponse(success=True)


@router.post("/login", response_model=SuccessResponse, response_model_exclude_none=True)
def login(
    body: LoginRequest,
    session: SessionState = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    if service.login(session, body.email, body.password):
        return SuccessResponse(success=True)
    return SuccessResponse(success=False, message="Invalid credentials")


@router.get("/user", response_model=CurrentUserResponse)
async def current_user(user: SessionUser = Depends(get_current_user)) -> CurrentUserResponse:
    return CurrentUserResponse.from_session_user(user)


@router.post("/logout", response_model=SuccessResponse, response_model_exclude_none=True)
async def logout(
    session: SessionState = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    service.logout(session)
    return SuccessResponse(success=True)
