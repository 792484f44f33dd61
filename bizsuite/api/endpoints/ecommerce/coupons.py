"""
Coupon Endpoints

Validation is open to every tenant user and never changes the coupon.
Management needs an owner or admin.
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bizsuite.api.deps import require_any_role, require_managers
from bizsuite.core.context import TenantContext
from bizsuite.database import get_db
from bizsuite.schemas.common import DataResponse, MessageData
from bizsuite.schemas.ecommerce import (
    CouponCreate,
    CouponResponse,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidation,
)
from bizsuite.services.ecommerce import coupons as coupon_service

router = APIRouter(prefix="/coupons", tags=["ecommerce"])


@router.post("/validate", response_model=DataResponse[CouponValidation])
async def validate_coupon(
    data: CouponValidateRequest,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    """
    Check a code against an order total.

    An unusable coupon is still a 200: ``{"valid": false, "error": ...}``.
    """
    result = coupon_service.validate_coupon(db, ctx, data.code, data.order_total)
    return {"success": True, "data": result}


@router.get("", response_model=DataResponse[List[CouponResponse]])
async def list_coupons(
    include_inactive: bool = Query(False, alias="includeInactive"),
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": coupon_service.list_coupons(db, ctx, include_inactive)}


@router.get("/{coupon_id}", response_model=DataResponse[CouponResponse])
async def get_coupon(
    coupon_id: str,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": coupon_service.get_coupon(db, ctx, coupon_id)}


@router.post("", response_model=DataResponse[CouponResponse], status_code=status.HTTP_201_CREATED)
async def create_coupon(
    data: CouponCreate,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": coupon_service.create_coupon(db, ctx, data)}


@router.put("/{coupon_id}", response_model=DataResponse[CouponResponse])
async def update_coupon(
    coupon_id: str,
    data: CouponUpdate,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": coupon_service.update_coupon(db, ctx, coupon_id, data)}


@router.delete("/{coupon_id}", response_model=DataResponse[MessageData])
async def delete_coupon(
    coupon_id: str,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    """A coupon that has been used is deactivated instead of deleted."""
    deleted = coupon_service.delete_coupon(db, ctx, coupon_id)
    message = "Coupon deleted successfully" if deleted else "Coupon has been used and was deactivated"
    return {"success": True, "data": {"message": message}}
