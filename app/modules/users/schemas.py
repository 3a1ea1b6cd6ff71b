from pydantic import BaseModel, ConfigDict, EmailStr, TypeAdapter, ValidationError
from typing import Optional, List, Any, Dict
from datetime import datetime
from enum import Enum
import json


class UserRole(str, Enum):
    ADMIN = "admin"
    MASTER = "master"
    STUDENT = "student"


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="allow")

    avatar: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None


def parse_profile(raw: Any) -> UserProfile:
    """Profile column is serialized text; anything unreadable becomes an empty profile."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raw = {}
    if not isinstance(raw, dict):
        raw = {}
    try:
        return UserProfile(**raw)
    except (TypeError, ValueError):
        return UserProfile()


_datetime_adapter = TypeAdapter(datetime)


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Stored timestamp as datetime, or None when missing or unreadable."""
    if raw is None:
        return None
    try:
        return _datetime_adapter.validate_python(raw)
    except ValidationError:
        return None


class UserUpdate(BaseModel):
    name: Optional[str] = None
    profile: Optional[UserProfile] = None


class UserResponse(BaseModel):
    id: str
    email: str
    name: str = ""
    role: UserRole = UserRole.STUDENT
    profile: UserProfile = UserProfile()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "UserResponse":
        role = record.get("role")
        return cls(
            id=str(record.get("id") or ""),
            email=str(record.get("email") or ""),
            name=str(record.get("name") or ""),
            role=role if role in {r.value for r in UserRole} else UserRole.STUDENT,
            profile=parse_profile(record.get("profile")),
            created_at=parse_timestamp(record.get("created_at")),
            updated_at=parse_timestamp(record.get("updated_at")),
        )


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int


class UserCreate(BaseModel):
    id: str
    email: EmailStr
    name: str
    role: UserRole = UserRole.STUDENT
