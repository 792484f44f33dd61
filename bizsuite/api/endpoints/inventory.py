"""
Inventory Endpoints

Products, stock adjustments and stock history for the caller's tenant.
Any tenant user may read and adjust stock; deleting a product needs an
owner or admin.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bizsuite.api.deps import PageParams, page_params, require_any_role, require_managers
from bizsuite.core.context import TenantContext
from bizsuite.database import get_db
from bizsuite.schemas.common import DataResponse, MessageData, PageResponse
from bizsuite.schemas.inventory import (
    InventoryStats,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    StockAdjustment,
    StockAdjustmentResult,
    StockMovementResponse,
)
from bizsuite.services import inventory as inventory_service

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.post("/products", response_model=DataResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    """
    Create a product.

    Counts against the plan's maxProducts limit (409 when full). A
    non-zero initial stock is logged as an adjustment movement.
    """
    return {"success": True, "data": inventory_service.create_product(db, ctx, data)}


@router.get("/products", response_model=PageResponse[ProductResponse])
async def list_products(
    paging: PageParams = Depends(page_params),
    category: Optional[str] = Query(None),
    low_stock: bool = Query(False, alias="lowStock"),
    search: Optional[str] = Query(None),
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    products, pagination = inventory_service.list_products(
        db, ctx, paging.page, paging.limit, category, low_stock, search
    )
    return {"success": True, "data": products, "pagination": pagination}


@router.get("/products/{product_id}", response_model=DataResponse[ProductResponse])
async def get_product(
    product_id: str,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": inventory_service.get_product(db, ctx, product_id)}


@router.put("/products/{product_id}", response_model=DataResponse[ProductResponse])
async def update_product(
    product_id: str,
    data: ProductUpdate,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": inventory_service.update_product(db, ctx, product_id, data)}


@router.delete("/products/{product_id}", response_model=DataResponse[MessageData])
async def delete_product(
    product_id: str,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    inventory_service.delete_product(db, ctx, product_id)
    return {"success": True, "data": {"message": "Product deleted successfully"}}


@router.post("/products/{product_id}/stock", response_model=DataResponse[StockAdjustmentResult])
async def adjust_stock(
    product_id: str,
    data: StockAdjustment,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    """Signed stock change; 409 if it would take stock below zero."""
    product, movement = inventory_service.adjust_stock(db, ctx, product_id, data)
    return {"success": True, "data": {"product": product, "movement": movement}}


@router.get("/low-stock", response_model=DataResponse[List[ProductResponse]])
async def low_stock(
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": inventory_service.low_stock_products(db, ctx)}


@router.get("/stats", response_model=DataResponse[InventoryStats])
async def inventory_stats(
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": inventory_service.inventory_stats(db, ctx)}


@router.get("/stock-history", response_model=PageResponse[StockMovementResponse])
async def stock_history(
    paging: PageParams = Depends(page_params),
    product_id: Optional[str] = Query(None, alias="productId"),
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    movements, pagination = inventory_service.stock_history(db, ctx, paging.page, paging.limit, product_id)
    return {"success": True, "data": movements, "pagination": pagination}
