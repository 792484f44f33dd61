"""
Custom Exceptions

Centralized exception definitions for better error handling.
Every application error carries an error ``kind`` which the handlers in
main.py render as ``{"error": kind, "message": detail}``.
"""
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for errors that map onto the API error envelope."""

    kind = "InternalError"

    def __init__(
        self,
        status_code: int,
        detail: str,
        headers: Optional[Dict[str, str]] = None,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.details = details


class InvalidInputError(AppError):
    """Raised when input validation fails."""

    kind = "ValidationError"

    def __init__(self, detail: str = "Invalid input", details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            details=details
        )


class AuthenticationError(AppError):
    """Raised when authentication fails."""

    kind = "Unauthorized"

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDenied(AppError):
    """Raised when the caller is authenticated but not allowed to act."""

    kind = "Forbidden"

    def __init__(self, detail: str = "You do not have permission to access this resource"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class TenantSuspendedError(PermissionDenied):
    """Raised when a suspended tenant's user tries to sign in or act."""

    def __init__(self):
        super().__init__("Your account has been suspended. Please contact support.")


class TrialExpiredError(PermissionDenied):
    """Raised when a tenant's trial has run out."""

    def __init__(self):
        super().__init__("Your trial has expired. Please upgrade to continue.")


class NotFoundError(AppError):
    """
    Raised when an entity does not exist for the caller.

    Rows owned by another tenant are reported exactly like missing rows.
    """

    kind = "NotFound"

    def __init__(self, entity: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity} not found"
        )
        self.entity = entity


class ConflictError(AppError):
    """Raised on uniqueness violations and blocked deletions."""

    kind = "Conflict"

    def __init__(self, detail: str = "Conflict"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail
        )


class DependencyExistsError(ConflictError):
    """Raised when a parent cannot be deleted because dependents exist."""

    def __init__(self, entity: str, dependency: str):
        super().__init__(f"Cannot delete {entity} with {dependency}")
        self.dependency = dependency


class CapacityExceededError(ConflictError):
    """Raised when creating a resource would exceed the tenant's plan limit."""

    def __init__(self, resource: str, plan_name: str, limit: int):
        super().__init__(
            f"{resource.capitalize()} limit reached. Your {plan_name} allows "
            f"{limit} {resource}. Please upgrade your plan."
        )
        self.resource = resource
        self.limit = limit


class LimitNotConfiguredError(AppError):
    """
    Raised when neither the plan nor the tenant override defines a limit.

    The operation is refused rather than guessed at.
    """

    kind = "InternalError"

    def __init__(self, limit_key: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Plan limit '{limit_key}' is not configured"
        )
        self.limit_key = limit_key


class RateLimitExceeded(AppError):
    """Raised when rate limit is exceeded."""

    kind = "RateLimited"

    def __init__(self, retry_after: int = 60):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Please try again later.",
            headers={"Retry-After": str(retry_after)}
        )
