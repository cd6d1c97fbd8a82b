"""
API request and response models for the lab's REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py, which own the
internal domain representation. Route handlers map between the two.

The wire format is camelCase (firstName, zipCode, isAdmin, createdAt); the
alias generator maps it onto snake_case attributes. FastAPI serializes
response models by alias, so handlers can build them with either name.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from auth.models import OtpRecord, SessionUser, User


class _CamelModel(BaseModel):
    # JSON numbers are accepted for string fields (e.g. an OTP posted as 123456).
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SendOtpRequest(_CamelModel):
    email: str


class VerifyOtpRequest(_CamelModel):
    email: str
    otp: str


class RegisterRequest(_CamelModel):
    """Body for POST /api/register. Profile fields are free text and optional."""

    email: str
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None


class LoginRequest(_CamelModel):
    email: str
    password: str


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SuccessResponse(_CamelModel):
    """{success, message?} envelope. message is omitted when None."""

    success: bool
    message: Optional[str] = None


class CurrentUserResponse(_CamelModel):
    id: int
    email: str
    is_admin: bool

    @classmethod
    def from_session_user(cls, user: SessionUser) -> "CurrentUserResponse":
        return cls(id=user.id, email=user.email, is_admin=user.is_admin)


class UserResponse(_CamelModel):
    """A user as listed to admins. There is deliberately no password field."""

    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    is_admin: bool
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """Factory Method: the domain -> transport mapping lives with the model."""
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            address=user.address,
            city=user.city,
            zip_code=user.zip_code,
            is_admin=user.is_admin,
            created_at=user.created_at or "",
        )


class OtpRecordResponse(_CamelModel):
    id: int
    email: str
    otp: str
    created_at: str

    @classmethod
    def from_record(cls, record: OtpRecord) -> "OtpRecordResponse":
        created = datetime.fromtimestamp(record.created_at or 0, tz=timezone.utc).isoformat()
        return cls(id=record.id, email=record.email, otp=record.otp, created_at=created)


class OtpLookupResponse(_CamelModel):
    """GET /otp/{email}: either the live code or a "No OTP found" message."""

    email: Optional[str] = None
    otp: Optional[str] = None
    expires_in: Optional[str] = None
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error envelope returned by every exception handler: {"error": message}."""

    error: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
