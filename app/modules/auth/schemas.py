from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from app.modules.users.schemas import UserResponse, UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: str = Field(min_length=1)
    role: UserRole = UserRole.STUDENT


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class RegisterResponse(BaseModel):
    user: UserResponse
    access_token: Optional[str] = None
    message: str


class CurrentUserResponse(UserResponse):
    permissions: List[str] = []
