from fastapi import APIRouter, Depends, Query
from app.modules.users.schemas import UserUpdate, UserResponse, UserListResponse
from app.modules.users.service import UserService
from app.core.dependencies import get_current_user, get_user_service, require_permission
from app.core.exceptions import ForbiddenError
from app.config.permissions_config import ADMIN

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: UserResponse = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=UserResponse)
async def update_me(
    user_data_body: UserUpdate,
    current_user: UserResponse = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Update own name and profile"""
    return service.update_user(current_user.id, user_data_body)


@router.get("", response_model=UserListResponse)
async def list_users(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: UserResponse = Depends(require_permission("users:read")),
    service: UserService = Depends(get_user_service)
):
    """List all users (admin)"""
    return service.list_users(limit=limit, offset=offset)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: UserResponse = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Get user by ID (only self, or any user for admins)"""
    if current_user.id != user_id and current_user.role.value != ADMIN:
        raise ForbiddenError("User not accessible")
    return service.get_user_by_id(user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data_body: UserUpdate,
    user: UserResponse = Depends(require_permission("users:update")),
    service: UserService = Depends(get_user_service)
):
    """Update another user's name and profile (admin)"""
    return service.update_user(user_id, user_data_body)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    user: UserResponse = Depends(require_permission("users:delete")),
    service: UserService = Depends(get_user_service)
):
    """Delete a user document (admin)"""
    service.delete_user(user_id)
    return None
