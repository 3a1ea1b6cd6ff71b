import hashlib
import time
from supabase import Client
from app.core.exceptions import AuthenticationError, ConflictError, ForbiddenError, StoreError
from app.config.permissions_config import SELF_REGISTER_ROLES
from app.modules.auth.schemas import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse
from app.modules.users.schemas import UserCreate
from app.modules.users.service import UserService
from fastapi import HTTPException
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

# In-memory cache for get_current_account to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_ACCOUNT_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def _cache_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _account_dict(user) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "user_metadata": user.user_metadata or {},
        "created_at": user.created_at,
    }


class AuthService:
    """Account and session operations on Supabase Auth."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_account(self, email: str, password: str, name: str) -> Dict[str, Any]:
        """Register a new account. Returns the account plus an access token when a session was opened."""
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": email,
                "password": password,
                "options": {
                    "data": {"name": name}
                }
            })
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise ConflictError("An account with this email already exists. Please try logging in instead.")
            logger.error(f"Registration failed for {email}: {error_message}")
            raise StoreError("Registration failed") from e

        if not auth_response.user:
            raise StoreError("Registration failed")
        account = _account_dict(auth_response.user)
        account["access_token"] = auth_response.session.access_token if auth_response.session else None
        return account

    def create_session(self, email: str, password: str) -> Dict[str, Any]:
        """Authenticate with email and password. Returns the account and its access token."""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": email,
                "password": password
            })
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise AuthenticationError("Invalid email or password")
            logger.error(f"Login failed for {email}: {error_message}")
            raise AuthenticationError("Login failed") from e

        if not auth_response.user or not auth_response.session:
            raise AuthenticationError("Invalid email or password")
        account = _account_dict(auth_response.user)
        account["access_token"] = auth_response.session.access_token
        return account

    def get_current_account(self, token: str) -> Dict[str, Any]:
        """Account behind a session token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = _cache_key(token)
            now = time.monotonic()
            if cache_key in _AUTH_ACCOUNT_CACHE:
                account, expiry = _AUTH_ACCOUNT_CACHE[cache_key]
                if now < expiry:
                    return account
                del _AUTH_ACCOUNT_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise AuthenticationError("Invalid or expired token")
            account = _account_dict(user_response.user)
            if len(_AUTH_ACCOUNT_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_ACCOUNT_CACHE[cache_key] = (account, now + _AUTH_CACHE_TTL_SEC)
            return account
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise AuthenticationError("Invalid or expired token")
            raise AuthenticationError("Authentication failed")

    def delete_session(self, token: Optional[str] = None) -> bool:
        """Logout. Supabase tokens are stateless JWTs, so this mostly forgets the cached account."""
        if token:
            _AUTH_ACCOUNT_CACHE.pop(_cache_key(token), None)
        try:
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def register(self, register_data: RegisterRequest, user_service: UserService) -> RegisterResponse:
        """Create the account, then the user document keyed by the account id."""
        if register_data.role.value not in SELF_REGISTER_ROLES:
            raise ForbiddenError("This role cannot be chosen at registration")
        account = self.create_account(register_data.email, register_data.password, register_data.name)
        user = user_service.create_user(UserCreate(
            id=account["id"],
            email=register_data.email,
            name=register_data.name,
            role=register_data.role,
        ))
        logger.info(f"Registered {user.role.value} account {user.id}")
        return RegisterResponse(
            user=user,
            access_token=account.get("access_token"),
            message="Registration successful",
        )

    def login(self, login_data: LoginRequest, user_service: UserService) -> TokenResponse:
        account = self.create_session(login_data.email, login_data.password)
        user = user_service.get_user_for_account(account)
        return TokenResponse(access_token=account["access_token"], user=user)
