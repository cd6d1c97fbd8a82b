"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, minimal logic). Stores map rows
into these; the service and routes do the work.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    email is not unique: the registration flow never checks for an existing
    record, so the same address may appear on several rows. Lookups by email
    return the oldest one.

    is_admin is decided once at registration from the email suffix and never
    recomputed.
    """

    email: str
    password: str  # bcrypt hash, never plaintext
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    zip_code: str | None = None
    is_admin: bool = False
    id: int | None = None
    created_at: str | None = None


@dataclass
class OtpRecord:
    """A one-time code issued to an email address.

    created_at is epoch seconds (float) so TTL arithmetic is a subtraction.
    """

    email: str
    otp: str
    id: int | None = None
    created_at: float | None = None


@dataclass
class SessionUser:
    """The authenticated-user marker stored in a session."""

    id: int
    email: str
    is_admin: bool

    def to_session(self) -> dict:
        return {"id": self.id, "email": self.email, "isAdmin": self.is_admin}

    @classmethod
    def from_session(cls, data: dict) -> SessionUser:
        return cls(id=data["id"], email=data["email"], is_admin=bool(data["isAdmin"]))
