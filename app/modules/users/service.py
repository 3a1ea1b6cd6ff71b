from app.database.document_store import DocumentStore, USERS, Equal, Limit, Offset, OrderDesc
from app.modules.users.schemas import UserCreate, UserUpdate, UserResponse, UserListResponse
from app.core.exceptions import NotFoundError, StoreError
from typing import Optional
from fastapi import HTTPException
from datetime import datetime
import json
import logging

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, store: DocumentStore):
        self.store = store

    def create_user(self, user_data: UserCreate) -> UserResponse:
        """Create the user document for a freshly registered account"""
        try:
            record = self.store.create(USERS, {
                "email": user_data.email,
                "name": user_data.name,
                "role": user_data.role.value,
                "profile": json.dumps({}),
            }, record_id=user_data.id)
            return UserResponse.from_record(record)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating user {user_data.id}: {str(e)}")
            raise StoreError("Failed to create user profile") from e

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Get user document by ID"""
        try:
            return UserResponse.from_record(self.store.get(USERS, user_id))
        except NotFoundError:
            raise NotFoundError("User not found")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting user {user_id}: {str(e)}")
            raise StoreError("Failed to fetch user") from e

    def get_user_by_email(self, email: str) -> Optional[UserResponse]:
        """Get user document by email; None when there is none"""
        try:
            result = self.store.list(USERS, [Equal("email", email), Limit(1)])
        except Exception as e:
            logger.error(f"Error looking up user by email: {str(e)}")
            raise StoreError("Failed to fetch user") from e
        if not result.records:
            return None
        return UserResponse.from_record(result.records[0])

    def get_user_for_account(self, account: dict) -> UserResponse:
        """User document behind an authenticated account. Older documents are keyed by email only."""
        try:
            return self.get_user_by_id(account["id"])
        except NotFoundError:
            user = self.get_user_by_email(account.get("email") or "")
            if user is None:
                raise
            return user

    def update_user(self, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update name and/or profile"""
        update_data = {"updated_at": datetime.utcnow().isoformat()}
        if user_data.name is not None:
            update_data["name"] = user_data.name
        if user_data.profile is not None:
            update_data["profile"] = user_data.profile.model_dump_json(exclude_none=True)
        try:
            return UserResponse.from_record(self.store.update(USERS, user_id, update_data))
        except NotFoundError:
            raise NotFoundError("User not found")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating user {user_id}: {str(e)}")
            raise StoreError("Profile update failed") from e

    def list_users(self, limit: int = 10, offset: int = 0) -> UserListResponse:
        try:
            result = self.store.list(USERS, [OrderDesc("created_at"), Limit(limit), Offset(offset)])
        except Exception as e:
            logger.error(f"Error listing users: {str(e)}")
            raise StoreError("Failed to fetch users") from e
        return UserListResponse(
            users=[UserResponse.from_record(r) for r in result.records],
            total=result.total
        )

    def delete_user(self, user_id: str) -> None:
        """Delete the user document. The auth account is removed separately by an operator."""
        try:
            self.store.delete(USERS, user_id)
        except Exception as e:
            logger.error(f"Error deleting user {user_id}: {str(e)}")
            raise StoreError("Failed to delete user") from e
