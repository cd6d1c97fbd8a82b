"""
api/routes/users.py -- Admin-only user listing.

Routes:
  GET /api/users/all   -- every registered user, password excluded
  GET /api/users/{id}  -- one user, password excluded; 404 when absent

Both require an admin session (require_admin -> 403 otherwise). The
password hash never leaves the store layer: UserResponse has no field for it.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.models import UserResponse
from auth.dependencies import get_auth_service, require_admin
from auth.errors import NotFound
from auth.models import SessionUser
from auth.service import AuthService

router = APIRouter()


# /users/all is registered before /users/{user_id} so "all" is never parsed as an id.
@router.get("/users/all", response_model=list[UserResponse])
def list_users(
    admin: SessionUser = Depends(require_admin),
    service: AuthService = Depends(get_auth_service),
) -> list[UserResponse]:
    return [UserResponse.from_user(u) for u in service.list_users()]


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    admin: SessionUser = Depends(require_admin),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Look up one user. Ids that are not integers cannot exist, so they 404."""
    if not (user_id.isascii() and user_id.isdigit()):
        raise NotFound()
    return UserResponse.from_user(service.get_user(int(user_id)))
