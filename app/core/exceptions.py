"""
Domain errors surfaced to clients.

All of them are HTTPExceptions so services can raise them directly, the same
way they raise HTTPException, and ``except HTTPException: raise`` keeps
passing them through untouched. The handler registered in ``app.main``
renders them as ``{"detail": ..., "redirect": ..., "errors": ...}``.
"""

from typing import Dict, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Something went wrong"

    def __init__(self, detail: Optional[str] = None, redirect_to: Optional[str] = None):
        super().__init__(status_code=self.default_status, detail=detail or self.default_detail)
        # Safe default view the client should navigate to
        self.redirect_to = redirect_to


class NotFoundError(AppError):
    default_status = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ForbiddenError(AppError):
    default_status = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class AuthenticationError(AppError):
    default_status = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication failed"


class ConflictError(AppError):
    default_status = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class StoreError(AppError):
    """A document/blob store call failed. The message is fixed; the cause goes to the log."""
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Something went wrong. Please try again."


class FormValidationError(AppError):
    default_status = 422
    default_detail = "Please correct the highlighted fields"

    def __init__(self, field_errors: Dict[str, str], detail: Optional[str] = None):
        super().__init__(detail=detail)
        self.field_errors = dict(field_errors)
