"""
Authentication Endpoints

Tenant registration (creates tenant + owner), login and the caller's
profile. Registration and login are the only unauthenticated tenant routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bizsuite.api.deps import get_tenant_context
from bizsuite.core.context import TenantContext
from bizsuite.database import get_db
from bizsuite.schemas.auth import AuthPayload, LoginRequest, MePayload, RegisterRequest
from bizsuite.schemas.common import DataResponse
from bizsuite.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=DataResponse[AuthPayload], status_code=status.HTTP_201_CREATED)
async def register(
    registration: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Register a new business.

    Creates the tenant on the trial plan, its owner user and one enabled
    module entry per available module, all in one transaction.
    """
    return {"success": True, "data": auth_service.register(db, registration)}


@router.post("/login", response_model=DataResponse[AuthPayload])
async def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate a user and return a JWT.

    SECURITY: unknown email and wrong password return the same 401.
    Suspended and expired tenants get 403 once the password checks out.
    """
    return {"success": True, "data": auth_service.login(db, credentials.email, credentials.password)}


@router.get("/me", response_model=DataResponse[MePayload])
async def me(
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db)
):
    """The caller, their tenant with effective limits, and enabled modules."""
    return {"success": True, "data": auth_service.current_user(db, ctx)}
