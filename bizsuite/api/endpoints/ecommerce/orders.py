"""
Order Endpoints

Checkout and "my orders" are open to every tenant user. Listing all
orders, status changes, cancellation and sales analytics need an owner
or admin.
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bizsuite.api.deps import PageParams, page_params, require_any_role, require_managers
from bizsuite.core.context import TenantContext
from bizsuite.database import get_db
from bizsuite.models.ecommerce import OrderStatus
from bizsuite.schemas.common import DataResponse, PageResponse
from bizsuite.schemas.ecommerce import (
    CheckoutRequest,
    OrderResponse,
    OrderStatusUpdate,
    SalesSummary,
    TopProduct,
)
from bizsuite.services.ecommerce import orders as order_service

router = APIRouter(prefix="/orders", tags=["ecommerce"])


@router.post("/checkout", response_model=DataResponse[OrderResponse], status_code=status.HTTP_201_CREATED)
async def checkout(
    data: CheckoutRequest,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    """
    Turn the caller's cart into an order.

    All or nothing: an invalid coupon (400) or insufficient stock (409)
    leaves the cart, stock and coupon usage untouched.
    """
    return {"success": True, "data": order_service.checkout(db, ctx, data)}


@router.get("/my-orders", response_model=PageResponse[OrderResponse])
async def my_orders(
    paging: PageParams = Depends(page_params),
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    orders, pagination = order_service.list_orders(
        db, ctx, paging.page, paging.limit, customer_id=ctx.user_id
    )
    return {"success": True, "data": orders, "pagination": pagination}


@router.get("/analytics/sales", response_model=DataResponse[SalesSummary])
async def sales_summary(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": order_service.sales_summary(db, ctx, start_date, end_date)}


@router.get("/analytics/top-products", response_model=DataResponse[List[TopProduct]])
async def top_products(
    limit: int = Query(10, ge=1, le=100),
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": order_service.top_products(db, ctx, limit)}


@router.get("", response_model=PageResponse[OrderResponse])
async def list_orders(
    paging: PageParams = Depends(page_params),
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    customer_id: Optional[str] = Query(None, alias="customerId"),
    search: Optional[str] = Query(None),
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    orders, pagination = order_service.list_orders(
        db, ctx, paging.page, paging.limit,
        status=order_status,
        start_date=start_date,
        end_date=end_date,
        customer_id=customer_id,
        search=search,
    )
    return {"success": True, "data": orders, "pagination": pagination}


@router.get("/{order_id}", response_model=DataResponse[OrderResponse])
async def get_order(
    order_id: str,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": order_service.get_order(db, ctx, order_id)}


@router.put("/{order_id}/status", response_model=DataResponse[OrderResponse])
async def update_status(
    order_id: str,
    data: OrderStatusUpdate,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": order_service.update_status(db, ctx, order_id, data.status)}


@router.post("/{order_id}/cancel", response_model=DataResponse[OrderResponse])
async def cancel_order(
    order_id: str,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    """409 once the order has shipped; otherwise stock is restored."""
    return {"success": True, "data": order_service.cancel_order(db, ctx, order_id)}
