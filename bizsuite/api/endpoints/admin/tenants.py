"""
Admin Tenant Endpoints

Cross-tenant management. Every mutation here is audited.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bizsuite.api.deps import PageParams, get_admin_context, page_params
from bizsuite.core.context import AdminContext
from bizsuite.database import get_db
from bizsuite.models.tenant import TenantStatus
from bizsuite.schemas.admin import AdminTenantDetail, AdminTenantRow, CustomLimitsUpdate, SuspendRequest
from bizsuite.schemas.common import DataResponse, PageResponse
from bizsuite.services.admin import tenants as admin_tenant_service

router = APIRouter(prefix="/tenants", tags=["admin"])


@router.get("", response_model=PageResponse[AdminTenantRow])
async def list_tenants(
    paging: PageParams = Depends(page_params),
    search: Optional[str] = Query(None),
    tenant_status: Optional[TenantStatus] = Query(None, alias="status"),
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    tenants, pagination = admin_tenant_service.list_tenants(
        db, paging.page, paging.limit, search, tenant_status
    )
    return {"success": True, "data": tenants, "pagination": pagination}


@router.get("/{tenant_id}", response_model=DataResponse[AdminTenantDetail])
async def get_tenant(
    tenant_id: str,
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": admin_tenant_service.get_tenant(db, tenant_id)}


@router.post("/{tenant_id}/suspend", response_model=DataResponse[AdminTenantDetail])
async def suspend_tenant(
    tenant_id: str,
    data: Optional[SuspendRequest] = None,
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    """
    Suspend a tenant.

    Its users are rejected on their next request, including requests
    carrying tokens issued before the suspension.
    """
    reason = data.reason if data else None
    admin_tenant_service.suspend_tenant(db, admin, tenant_id, reason)
    return {"success": True, "data": admin_tenant_service.get_tenant(db, tenant_id)}


@router.post("/{tenant_id}/activate", response_model=DataResponse[AdminTenantDetail])
async def activate_tenant(
    tenant_id: str,
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    """Reactivate a suspended or expired tenant; 409 from any other state."""
    admin_tenant_service.activate_tenant(db, admin, tenant_id)
    return {"success": True, "data": admin_tenant_service.get_tenant(db, tenant_id)}


@router.put("/{tenant_id}/limits", response_model=DataResponse[AdminTenantDetail])
async def set_custom_limits(
    tenant_id: str,
    data: CustomLimitsUpdate,
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    """Replace the tenant's limit overrides. Keys left out fall back to the plan."""
    return {
        "success": True,
        "data": admin_tenant_service.set_custom_limits(db, admin, tenant_id, data.custom_limits),
    }
