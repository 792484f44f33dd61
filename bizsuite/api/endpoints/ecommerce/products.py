"""
Storefront Product Endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bizsuite.api.deps import PageParams, page_params, require_any_role, require_managers
from bizsuite.core.context import TenantContext
from bizsuite.database import get_db
from bizsuite.schemas.common import DataResponse, MessageData, PageResponse
from bizsuite.schemas.ecommerce import StockSet, StoreProductCreate, StoreProductResponse, StoreProductUpdate
from bizsuite.services.ecommerce import products as product_service

router = APIRouter(prefix="/products", tags=["ecommerce"])


@router.get("/featured", response_model=DataResponse[List[StoreProductResponse]])
async def featured_products(
    limit: int = Query(10, ge=1, le=50),
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": product_service.featured_products(db, ctx, limit)}


@router.get("/low-stock", response_model=DataResponse[List[StoreProductResponse]])
async def low_stock_products(
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": product_service.low_stock_products(db, ctx)}


@router.get("/slug/{slug}", response_model=DataResponse[StoreProductResponse])
async def get_product_by_slug(
    slug: str,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": product_service.get_product_by_slug(db, ctx, slug)}


@router.get("", response_model=PageResponse[StoreProductResponse])
async def list_products(
    paging: PageParams = Depends(page_params),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    is_featured: Optional[bool] = Query(None, alias="isFeatured"),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    in_stock: bool = Query(False, alias="inStock"),
    search: Optional[str] = Query(None),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    products, pagination = product_service.list_products(
        db, ctx, paging.page, paging.limit,
        category_id=category_id,
        is_active=is_active,
        is_featured=is_featured,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {"success": True, "data": products, "pagination": pagination}


@router.get("/{product_id}", response_model=DataResponse[StoreProductResponse])
async def get_product(
    product_id: str,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": product_service.get_product(db, ctx, product_id)}


@router.post("", response_model=DataResponse[StoreProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(
    data: StoreProductCreate,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    """Counts against the plan's maxProducts limit (409 when full)."""
    return {"success": True, "data": product_service.create_product(db, ctx, data)}


@router.put("/{product_id}", response_model=DataResponse[StoreProductResponse])
async def update_product(
    product_id: str,
    data: StoreProductUpdate,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": product_service.update_product(db, ctx, product_id, data)}


@router.delete("/{product_id}", response_model=DataResponse[MessageData])
async def delete_product(
    product_id: str,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    product_service.delete_product(db, ctx, product_id)
    return {"success": True, "data": {"message": "Product deleted successfully"}}


@router.put("/{product_id}/stock", response_model=DataResponse[StoreProductResponse])
async def set_stock(
    product_id: str,
    data: StockSet,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": product_service.set_stock(db, ctx, product_id, data.quantity)}
