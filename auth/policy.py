"""
auth/policy.py -- Admin privilege policy.

The lab grants admin rights to any account whose email ends with the company
domain. The check runs once, at registration, against whatever email the
client submitted; domain ownership is never verified beyond the OTP sent to
that address. This is the weakness the lab is built around -- keep it exact.
"""

from __future__ import annotations

from auth.errors import Forbidden
from auth.models import SessionUser

ADMIN_DOMAIN_SUFFIX = "@teghindustries.com"


def email_matches_admin_domain(email: str) -> bool:
    """Case-sensitive suffix match against ADMIN_DOMAIN_SUFFIX."""
    return email.endswith(ADMIN_DOMAIN_SUFFIX)


def require_admin(user: SessionUser | None) -> SessionUser:
    """Return user if it is an authenticated admin, otherwise raise Forbidden.

    Anonymous callers get Forbidden too, not Unauthenticated.
    """
    if user is None or not user.is_admin:
        raise Forbidden()
    return user
