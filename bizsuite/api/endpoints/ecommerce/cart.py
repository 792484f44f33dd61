"""
Cart Endpoints

Every tenant user has their own cart. Item ids outside the caller's
active cart are a 404.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bizsuite.api.deps import require_any_role
from bizsuite.core.context import TenantContext
from bizsuite.database import get_db
from bizsuite.schemas.common import DataResponse
from bizsuite.schemas.ecommerce import CartItemAdd, CartItemQuantity, CartResponse, CartTotals
from bizsuite.services.ecommerce import carts as cart_service

router = APIRouter(prefix="/cart", tags=["ecommerce"])


@router.get("", response_model=DataResponse[CartResponse])
async def get_cart(
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": cart_service.get_cart(db, ctx)}


@router.get("/totals", response_model=DataResponse[CartTotals])
async def cart_totals(
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": cart_service.cart_totals(db, ctx)}


@router.post("/items", response_model=DataResponse[CartResponse])
async def add_item(
    data: CartItemAdd,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    """Adding a product already in the cart increases its quantity."""
    return {"success": True, "data": cart_service.add_item(db, ctx, data.product_id, data.quantity)}


@router.put("/items/{item_id}", response_model=DataResponse[CartResponse])
async def update_item(
    item_id: str,
    data: CartItemQuantity,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    """A quantity of zero or less removes the item."""
    return {"success": True, "data": cart_service.update_item_quantity(db, ctx, item_id, data.quantity)}


@router.delete("/items/{item_id}", response_model=DataResponse[CartResponse])
async def remove_item(
    item_id: str,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": cart_service.remove_item(db, ctx, item_id)}


@router.delete("", response_model=DataResponse[CartResponse])
async def clear_cart(
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": cart_service.clear_cart(db, ctx)}
