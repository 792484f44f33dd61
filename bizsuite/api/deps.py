"""
API Dependencies

Reusable FastAPI dependencies for authentication and authorization.
These are used across all API endpoints to ensure consistent security.

PATTERN: authentication produces an explicit context object
(TenantContext or AdminContext) which endpoints pass into the service
layer. Nothing downstream reads identity from the request.
"""
from dataclasses import dataclass
from typing import AbstractSet, Callable, Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bizsuite.core.context import AdminContext, TenantContext
from bizsuite.core.exceptions import AuthenticationError, PermissionDenied
from bizsuite.core.permissions import ANY_ROLE, MANAGERS, OWNER_ONLY, authorize
from bizsuite.database import get_db
from bizsuite.services import auth as auth_service
from bizsuite.services.admin import auth as admin_auth_service
from bizsuite.services.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from bizsuite.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)

# auto_error=False so a missing header yields our 401 envelope, not a bare 403
security = HTTPBearer(auto_error=False)


def _bearer(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    return credentials.credentials


async def get_tenant_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> TenantContext:
    """
    Authenticate a tenant user.

    This dependency:
    1. Validates the JWT (signature, expiry, token type)
    2. Reloads the user and tenant from the database
    3. Rejects inactive users and suspended or expired tenants

    SECURITY: step 2 runs on every request, so suspending a tenant locks
    out tokens issued before the suspension.
    """
    ctx = auth_service.resolve_session(db, _bearer(credentials))
    request.state.tenant_id = ctx.tenant_id
    request.state.user_id = ctx.user_id
    return ctx


def require_roles(allowed: AbstractSet) -> Callable:
    """
    Build a dependency that admits only the given tenant roles.

    Usage: ``ctx: TenantContext = Depends(require_roles(MANAGERS))``
    """
    async def dependency(ctx: TenantContext = Depends(get_tenant_context)) -> TenantContext:
        if not authorize(ctx.role, allowed):
            log_security_event(
                "forbidden_action",
                {"tenant_id": ctx.tenant_id, "user_id": ctx.user_id, "role": ctx.role.value},
                logger
            )
            raise PermissionDenied("Insufficient permissions")
        return ctx

    return dependency


require_any_role = require_roles(ANY_ROLE)
require_managers = require_roles(MANAGERS)
require_owner = require_roles(OWNER_ONLY)


async def get_admin_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> AdminContext:
    """Authenticate a platform admin. Tenant tokens are rejected."""
    ctx = admin_auth_service.resolve_admin(db, _bearer(credentials))
    request.state.admin_id = ctx.admin_id
    return ctx


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
) -> PageParams:
    """Offset pagination: 1-indexed page, limit capped at MAX_PAGE_SIZE."""
    return PageParams(page=page, limit=limit)
