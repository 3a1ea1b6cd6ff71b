from fastapi import APIRouter, Depends
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, CurrentUserResponse
)
from app.modules.auth.service import AuthService
from app.modules.users.schemas import UserResponse
from app.modules.users.service import UserService
from app.core.dependencies import (
    get_auth_service, get_current_token, get_current_user, get_user_permissions, get_user_service
)
from app.config.permissions_config import PERMISSION_MATRIX

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
    user_service: UserService = Depends(get_user_service)
):
    """Register a new master or student account"""
    return service.register(register_data, user_service)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
    user_service: UserService = Depends(get_user_service)
):
    """Login and get access token"""
    return service.login(login_data, user_service)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.delete_session(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(current_user: UserResponse = Depends(get_current_user)):
    """Get current authenticated user and their permissions (for frontend UI)."""
    return CurrentUserResponse(**current_user.model_dump(), permissions=get_user_permissions(current_user))


@router.get("/permissions")
async def get_permissions():
    """Full role/permission matrix"""
    return PERMISSION_MATRIX
