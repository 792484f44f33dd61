"""
User Management Endpoints

Users within the caller's tenant. All operations are scoped to the
tenant in the caller's token.

RBAC:
- List/get/create/update/deactivate: owner or admin
- Change password: any user, own account only
- The owner row cannot be edited or deactivated here
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bizsuite.api.deps import PageParams, get_tenant_context, page_params, require_managers
from bizsuite.core.context import TenantContext
from bizsuite.database import get_db
from bizsuite.models.user import UserRole
from bizsuite.schemas.common import DataResponse, MessageData, PageResponse
from bizsuite.schemas.user import PasswordChange, UserCreate, UserResponse, UserUpdate
from bizsuite.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=PageResponse[UserResponse])
async def list_users(
    paging: PageParams = Depends(page_params),
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    """List users in the current tenant, filterable by role and active flag."""
    users, pagination = user_service.list_users(db, ctx, paging.page, paging.limit, role, is_active)
    return {"success": True, "data": users, "pagination": pagination}


@router.post("/change-password", response_model=DataResponse[MessageData])
async def change_password(
    data: PasswordChange,
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db)
):
    user_service.change_password(db, ctx, data)
    return {"success": True, "data": {"message": "Password changed successfully"}}


@router.get("/{user_id}", response_model=DataResponse[UserResponse])
async def get_user(
    user_id: str,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    """TENANT_ISOLATION: a user of another tenant is a 404."""
    return {"success": True, "data": user_service.get_user(db, ctx, user_id)}


@router.post("", response_model=DataResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    """
    Create an admin or staff user.

    Counts against the plan's maxUsers limit (409 when full).
    """
    return {"success": True, "data": user_service.create_user(db, ctx, user_data)}


@router.put("/{user_id}", response_model=DataResponse[UserResponse])
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": user_service.update_user(db, ctx, user_id, user_data)}


@router.delete("/{user_id}", response_model=DataResponse[MessageData])
async def deactivate_user(
    user_id: str,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    """Soft delete: the user is deactivated, not removed."""
    user_service.deactivate_user(db, ctx, user_id)
    return {"success": True, "data": {"message": "User deactivated successfully"}}
