"""
Tenant Endpoints

The caller's own tenant. Renaming and plan changes are owner-only.
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bizsuite.api.deps import get_tenant_context, require_owner
from bizsuite.core.context import TenantContext
from bizsuite.database import get_db
from bizsuite.models.plan import Plan
from bizsuite.schemas.common import DataResponse
from bizsuite.schemas.plan import PlanResponse
from bizsuite.schemas.tenant import TenantDetail, TenantStats, TenantUpdate, UpgradePlanRequest
from bizsuite.services import tenants as tenant_service

router = APIRouter(prefix="/tenant", tags=["tenant"])


@router.get("", response_model=DataResponse[TenantDetail])
async def get_tenant(
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": tenant_service.get_current_tenant(db, ctx)}


@router.put("", response_model=DataResponse[TenantDetail])
async def update_tenant(
    data: TenantUpdate,
    ctx: TenantContext = Depends(require_owner),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": tenant_service.update_tenant(db, ctx, data.name)}


@router.get("/plans", response_model=DataResponse[List[PlanResponse]])
async def available_plans(
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db)
):
    """Plans a tenant can upgrade to."""
    plans = db.query(Plan).order_by(Plan.price.asc()).all()
    return {"success": True, "data": plans}


@router.post("/upgrade", response_model=DataResponse[TenantDetail])
async def upgrade_plan(
    data: UpgradePlanRequest,
    ctx: TenantContext = Depends(require_owner),
    db: Session = Depends(get_db)
):
    """
    Move the tenant to another plan.

    Ends a trial (status becomes active). Suspended or expired tenants
    cannot upgrade themselves.
    """
    return {"success": True, "data": tenant_service.upgrade_plan(db, ctx, data.plan_id)}


@router.get("/stats", response_model=DataResponse[TenantStats])
async def tenant_stats(
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": tenant_service.tenant_stats(db, ctx)}
