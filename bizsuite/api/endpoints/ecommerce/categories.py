"""
Storefront Category Endpoints

Reads are open to every tenant user; changes need an owner or admin.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bizsuite.api.deps import require_any_role, require_managers
from bizsuite.core.context import TenantContext
from bizsuite.database import get_db
from bizsuite.schemas.common import DataResponse, MessageData
from bizsuite.schemas.ecommerce import (
    CategoryCreate,
    CategoryNode,
    CategoryReorder,
    CategoryResponse,
    CategoryUpdate,
)
from bizsuite.services.ecommerce import categories as category_service

router = APIRouter(prefix="/categories", tags=["ecommerce"])


@router.get("", response_model=DataResponse[List[CategoryResponse]])
async def list_categories(
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": category_service.list_categories(db, ctx)}


@router.get("/tree", response_model=DataResponse[List[CategoryNode]])
async def category_tree(
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    """Root categories with two levels of children."""
    return {"success": True, "data": category_service.category_tree(db, ctx)}


@router.put("/reorder", response_model=DataResponse[MessageData])
async def reorder_categories(
    data: CategoryReorder,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    updated = category_service.reorder_categories(db, ctx, data.items)
    return {"success": True, "data": {"message": f"{updated} categories reordered"}}


@router.get("/{category_id}", response_model=DataResponse[CategoryResponse])
async def get_category(
    category_id: str,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": category_service.get_category(db, ctx, category_id)}


@router.post("", response_model=DataResponse[CategoryResponse], status_code=status.HTTP_201_CREATED)
async def create_category(
    data: CategoryCreate,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": category_service.create_category(db, ctx, data)}


@router.put("/{category_id}", response_model=DataResponse[CategoryResponse])
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": category_service.update_category(db, ctx, category_id, data)}


@router.delete("/{category_id}", response_model=DataResponse[MessageData])
async def delete_category(
    category_id: str,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    """409 while the category has subcategories or products."""
    category_service.delete_category(db, ctx, category_id)
    return {"success": True, "data": {"message": "Category deleted successfully"}}
