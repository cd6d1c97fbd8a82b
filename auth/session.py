"""
auth/session.py -- Per-request session state.

SessionState is the only way the auth core touches a session. It wraps any
mutable mapping: in the API that is request.session from Starlette's
SessionMiddleware (a signed cookie); in tests it is a plain dict. The service
receives a SessionState explicitly on every call -- there is no ambient or
global session.

Keys used by the auth core:
  verifiedEmail -- email proven by a successful OTP check
  user          -- {"id", "email", "isAdmin"} once logged in or registered
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

VERIFIED_EMAIL_KEY = "verifiedEmail"
USER_KEY = "user"


class SessionState:
    """get/set/destroy view over one client's session data."""

    def __init__(self, data: MutableMapping[str, Any] | None = None) -> None:
        self._data: MutableMapping[str, Any] = data if data is not None else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def destroy(self) -> None:
        """Drop every marker. SessionMiddleware clears the cookie on the response."""
        self._data.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._data
