"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config.permissions_config import ROLE_HOME, get_role_permissions
from app.core.exceptions import AuthenticationError, ForbiddenError, NotFoundError
from app.database.blob_store import BlobStore
from app.database.document_store import DocumentStore
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import AuthService
from app.modules.users.schemas import UserResponse
from app.modules.users.service import UserService
from app.modules.workshops.schemas import WorkshopResponse, WorkshopStatus
from supabase import Client
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def get_document_store(supabase: Client = Depends(get_service_supabase)) -> DocumentStore:
    return DocumentStore(supabase)


def get_blob_store(supabase: Client = Depends(get_service_supabase)) -> BlobStore:
    return BlobStore(supabase)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_user_service(store: DocumentStore = Depends(get_document_store)) -> UserService:
    return UserService(store)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def _resolve_user(request: Request, token: str, auth_service: AuthService, user_service: UserService) -> UserResponse:
    # Resolved once per request; later dependencies reuse it
    cached = getattr(request.state, "current_user", None)
    if cached is not None:
        return cached
    account = auth_service.get_current_account(token)
    try:
        user = user_service.get_user_for_account(account)
    except NotFoundError:
        raise AuthenticationError("No user profile for this account")
    request.state.current_user = user
    return user


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    """The signed-in user for this request"""
    return _resolve_user(request, credentials.credentials, auth_service, user_service)


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_security),
    auth_service: AuthService = Depends(get_auth_service),
    user_service: UserService = Depends(get_user_service),
) -> Optional[UserResponse]:
    """Like get_current_user for public routes: anonymous callers get None, a bad token still fails."""
    if credentials is None:
        return None
    return _resolve_user(request, credentials.credentials, auth_service, user_service)


def get_user_permissions(user: UserResponse) -> List[str]:
    return get_role_permissions(user.role.value)


def _role_home(user: UserResponse) -> str:
    return ROLE_HOME.get(user.role.value, "/")


def require_role(*roles: str):
    """Factory function to create a role check dependency"""
    def check_role(user: UserResponse = Depends(get_current_user)) -> UserResponse:
        if user.role.value not in roles:
            raise ForbiddenError(
                f"This page is only available to {' or '.join(roles)} accounts",
                redirect_to=_role_home(user),
            )
        return user
    return check_role


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(user: UserResponse = Depends(get_current_user)) -> UserResponse:
        """Dependency to check if user has required permission"""
        if required_permission not in get_user_permissions(user):
            logger.info(f"User {user.id} ({user.role.value}) lacks {required_permission}")
            raise ForbiddenError(
                f"Insufficient permissions. Required: {required_permission}",
                redirect_to=_role_home(user),
            )
        return user
    return check_permission


def check_workshop_owner(workshop: WorkshopResponse, user: UserResponse) -> None:
    """Only the master who created a workshop may change it or review its applications"""
    if workshop.master_id != user.id:
        raise ForbiddenError("You do not own this workshop", redirect_to="/master/dashboard")


def check_workshop_visible(workshop: WorkshopResponse, user: Optional[UserResponse]) -> None:
    """Unpublished workshops exist only for their owner"""
    if workshop.status == WorkshopStatus.PUBLISHED:
        return
    if user is not None and workshop.master_id == user.id:
        return
    raise NotFoundError("This workshop is not available for viewing.", redirect_to="/workshops")
