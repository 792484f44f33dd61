"""Admin Analytics Endpoints"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bizsuite.api.deps import get_admin_context
from bizsuite.core.context import AdminContext
from bizsuite.database import get_db
from bizsuite.schemas.admin import GrowthPoint, OverviewStats, PlanShare
from bizsuite.schemas.common import DataResponse
from bizsuite.services.admin import analytics as analytics_service

router = APIRouter(prefix="/analytics", tags=["admin"])


@router.get("/overview", response_model=DataResponse[OverviewStats])
async def overview(
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": analytics_service.overview(db)}


@router.get("/growth", response_model=DataResponse[List[GrowthPoint]])
async def tenant_growth(
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    """New tenants per month, last six months."""
    return {"success": True, "data": analytics_service.tenant_growth(db)}


@router.get("/plans", response_model=DataResponse[List[PlanShare]])
async def plan_distribution(
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": analytics_service.plan_distribution(db)}
