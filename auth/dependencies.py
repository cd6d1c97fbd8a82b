"""
auth/dependencies.py -- FastAPI Depends() helpers for sessions and authorization.

get_session() wraps request.session (Starlette SessionMiddleware) in a
SessionState so the service never sees the Request object.

try_get_current_user() is the soft variant (returns None when anonymous).
get_current_user() raises Unauthenticated (401) when no user is logged in.
require_admin() raises Forbidden (403) unless the logged-in user is an admin;
anonymous callers also get 403.

Layer rule: this is the only auth/ module that imports fastapi, because it is
part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Depends, Request

from auth import policy
from auth.errors import Unauthenticated
from auth.models import SessionUser
from auth.service import AuthService
from auth.session import SessionState


def get_session(request: Request) -> SessionState:
    return SessionState(request.session)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def try_get_current_user(
    session: SessionState = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
) -> SessionUser | None:
    try:
        return service.current_user(session)
    except Unauthenticated:
        return None


def get_current_user(
    session: SessionState = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
) -> SessionUser:
    """Require a logged-in session. Raises Unauthenticated (401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(user: SessionUser = Depends(get_current_user)): ...
    """
    return service.current_user(session)


def require_admin(user: SessionUser | None = Depends(try_get_current_user)) -> SessionUser:
    """Require an admin session. Raises Forbidden (403) otherwise.

    Use as a FastAPI dependency:
        @router.get("/admin-only")
        async def route(user: SessionUser = Depends(require_admin)): ...
    """
    return policy.require_admin(user)
