"""
Expense Endpoints
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bizsuite.api.deps import PageParams, page_params, require_any_role, require_managers
from bizsuite.core.context import TenantContext
from bizsuite.database import get_db
from bizsuite.schemas.common import DataResponse, MessageData, PageResponse
from bizsuite.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseSummary, ExpenseUpdate
from bizsuite.services import expenses as expense_service

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.post("", response_model=DataResponse[ExpenseResponse], status_code=status.HTTP_201_CREATED)
async def create_expense(
    data: ExpenseCreate,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": expense_service.create_expense(db, ctx, data)}


@router.get("", response_model=PageResponse[ExpenseResponse])
async def list_expenses(
    paging: PageParams = Depends(page_params),
    category: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    expenses, pagination = expense_service.list_expenses(
        db, ctx, paging.page, paging.limit, category, start_date, end_date
    )
    return {"success": True, "data": expenses, "pagination": pagination}


@router.get("/summary", response_model=DataResponse[ExpenseSummary])
async def expense_summary(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    """Totals for the range plus a six-month trend."""
    return {"success": True, "data": expense_service.expense_summary(db, ctx, start_date, end_date)}


@router.get("/categories", response_model=DataResponse[List[str]])
async def expense_categories(
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": expense_service.expense_categories(db, ctx)}


@router.get("/{expense_id}", response_model=DataResponse[ExpenseResponse])
async def get_expense(
    expense_id: str,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": expense_service.get_expense(db, ctx, expense_id)}


@router.put("/{expense_id}", response_model=DataResponse[ExpenseResponse])
async def update_expense(
    expense_id: str,
    data: ExpenseUpdate,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": expense_service.update_expense(db, ctx, expense_id, data)}


@router.delete("/{expense_id}", response_model=DataResponse[MessageData])
async def delete_expense(
    expense_id: str,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    expense_service.delete_expense(db, ctx, expense_id)
    return {"success": True, "data": {"message": "Expense deleted successfully"}}
