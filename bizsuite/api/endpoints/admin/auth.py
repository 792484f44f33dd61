"""
Admin Authentication Endpoints

Platform admins sign in here with their own credentials and receive an
admin token. Tenant tokens are not accepted anywhere under /admin.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bizsuite.api.deps import get_admin_context
from bizsuite.core.context import AdminContext
from bizsuite.database import get_db
from bizsuite.schemas.admin import AdminAuthPayload, AdminLoginRequest, AdminProfile
from bizsuite.schemas.common import DataResponse
from bizsuite.services.admin import auth as admin_auth_service

router = APIRouter(prefix="/auth", tags=["admin"])


@router.post("/login", response_model=DataResponse[AdminAuthPayload])
async def login(
    credentials: AdminLoginRequest,
    db: Session = Depends(get_db)
):
    """Every successful admin login is written to the audit log."""
    return {"success": True, "data": admin_auth_service.login(db, credentials.email, credentials.password)}


@router.get("/profile", response_model=DataResponse[AdminProfile])
async def profile(
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": admin_auth_service.get_profile(db, admin)}
