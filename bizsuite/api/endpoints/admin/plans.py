"""Admin Plan Endpoints"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bizsuite.api.deps import get_admin_context
from bizsuite.core.context import AdminContext
from bizsuite.database import get_db
from bizsuite.schemas.common import DataResponse, MessageData
from bizsuite.schemas.plan import PlanCreate, PlanUpdate, PlanWithUsage
from bizsuite.services.admin import plans as admin_plan_service

router = APIRouter(prefix="/plans", tags=["admin"])


@router.get("", response_model=DataResponse[List[PlanWithUsage]])
async def list_plans(
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": admin_plan_service.list_plans(db)}


@router.post("", response_model=DataResponse[PlanWithUsage], status_code=status.HTTP_201_CREATED)
async def create_plan(
    data: PlanCreate,
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": admin_plan_service.create_plan(db, admin, data)}


@router.put("/{plan_id}", response_model=DataResponse[PlanWithUsage])
async def update_plan(
    plan_id: str,
    data: PlanUpdate,
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": admin_plan_service.update_plan(db, admin, plan_id, data)}


@router.delete("/{plan_id}", response_model=DataResponse[MessageData])
async def delete_plan(
    plan_id: str,
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    """409 while any tenant is on the plan."""
    admin_plan_service.delete_plan(db, admin, plan_id)
    return {"success": True, "data": {"message": "Plan deleted successfully"}}
