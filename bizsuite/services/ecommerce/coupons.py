"""
Coupons

Discount codes, always stored upper case and unique per tenant.

Validation is side-effect free. The usage counter only moves at checkout,
through claim_coupon(), as a guarded UPDATE.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from bizsuite.core.context import TenantContext
from bizsuite.core.exceptions import ConflictError
from bizsuite.database import atomic
from bizsuite.models.ecommerce import Coupon, DiscountType, Order
from bizsuite.schemas.ecommerce import CouponCreate, CouponUpdate
from bizsuite.services.common import apply_updates, get_owned
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CouponCheck:
    """Outcome of evaluating a coupon against an order subtotal."""

    valid: bool
    error: Optional[str] = None
    discount: Decimal = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def calculate_discount(discount_type: DiscountType, value: Any, subtotal: Any) -> Decimal:
    """
    Discount for an order subtotal.

    Percentage: subtotal * value / 100. Fixed amount: capped at the
    subtotal, so the discount never exceeds what is being paid.
    """
    value = to_decimal(value)
    subtotal = to_decimal(subtotal)
    if discount_type == DiscountType.PERCENTAGE:
        return subtotal * value / Decimal(100)
    return min(value, subtotal)


def evaluate_coupon(coupon: Optional[Coupon], subtotal: Any, now: datetime) -> CouponCheck:
    """Check an (already looked up) coupon against ``subtotal`` at ``now``."""
    if coupon is None or not coupon.is_active:
        return CouponCheck(False, "Coupon not found")
    if coupon.starts_at and coupon.starts_at > now:
        return CouponCheck(False, "Coupon not yet active")
    if coupon.expires_at and coupon.expires_at < now:
        return CouponCheck(False, "Coupon has expired")
    if coupon.max_uses is not None and coupon.uses_count >= coupon.max_uses:
        return CouponCheck(False, "Coupon usage limit reached")

    subtotal = to_decimal(subtotal)
    if coupon.min_order_amount is not None and subtotal < to_decimal(coupon.min_order_amount):
        minimum = to_decimal(coupon.min_order_amount)
        return CouponCheck(False, f"Minimum order amount of ${minimum:.2f} required")

    return CouponCheck(True, discount=calculate_discount(coupon.discount_type, coupon.discount_value, subtotal))


def find_coupon(db: Session, tenant_id: str, code: str) -> Optional[Coupon]:
    return db.query(Coupon).filter(
        Coupon.tenant_id == tenant_id,
        Coupon.code == code.strip().upper()
    ).first()


def validate_coupon(db: Session, ctx: TenantContext, code: str, order_total: float) -> Dict[str, Any]:
    coupon = find_coupon(db, ctx.tenant_id, code)
    check = evaluate_coupon(coupon, order_total, datetime.utcnow())
    if not check.valid:
        return {"valid": False, "error": check.error}
    return {
        "valid": True,
        "coupon": coupon,
        "discount_amount": float(check.discount),
    }


def claim_coupon(db: Session, coupon: Coupon) -> None:
    """
    Count one use of ``coupon`` inside the caller's transaction.

    The WHERE clause re-checks the usage cap, so the last remaining use
    cannot be claimed twice.
    """
    claimed = db.query(Coupon).filter(
        Coupon.id == coupon.id,
        Coupon.tenant_id == coupon.tenant_id,
        Coupon.is_active.is_(True),
        or_(Coupon.max_uses.is_(None), Coupon.uses_count < Coupon.max_uses)
    ).update({Coupon.uses_count: Coupon.uses_count + 1}, synchronize_session=False)
    if claimed == 0:
        raise ConflictError("Coupon usage limit reached")


def list_coupons(db: Session, ctx: TenantContext, include_inactive: bool = False) -> List[Coupon]:
    query = db.query(Coupon).filter(Coupon.tenant_id == ctx.tenant_id)
    if not include_inactive:
        query = query.filter(Coupon.is_active.is_(True))
    return query.order_by(Coupon.created_at.desc()).all()


def get_coupon(db: Session, ctx: TenantContext, coupon_id: str) -> Coupon:
    return get_owned(db, Coupon, ctx.tenant_id, coupon_id, "Coupon")


def create_coupon(db: Session, ctx: TenantContext, data: CouponCreate) -> Coupon:
    if find_coupon(db, ctx.tenant_id, data.code):
        raise ConflictError("Coupon code already exists")
    with atomic(db):
        coupon = Coupon(tenant_id=ctx.tenant_id, **data.model_dump())
        db.add(coupon)
    logger.info(f"Coupon created: {coupon.code}", extra={"tenant_id": ctx.tenant_id})
    return coupon


def update_coupon(db: Session, ctx: TenantContext, coupon_id: str, data: CouponUpdate) -> Coupon:
    coupon = get_owned(db, Coupon, ctx.tenant_id, coupon_id, "Coupon")
    changes = data.model_dump(exclude_unset=True)
    if "code" in changes and changes["code"] != coupon.code:
        existing = find_coupon(db, ctx.tenant_id, changes["code"])
        if existing is not None and existing.id != coupon.id:
            raise ConflictError("Coupon code already exists")
    with atomic(db):
        apply_updates(coupon, changes)
    return coupon


def delete_coupon(db: Session, ctx: TenantContext, coupon_id: str) -> bool:
    """
    Delete a coupon, or deactivate it when orders reference it.

    Returns True when the row was actually deleted.
    """
    coupon = get_owned(db, Coupon, ctx.tenant_id, coupon_id, "Coupon")
    used = coupon.uses_count > 0 or db.query(Order.id).filter(
        Order.tenant_id == ctx.tenant_id,
        Order.coupon_id == coupon.id
    ).first() is not None

    with atomic(db):
        if used:
            coupon.is_active = False
        else:
            db.delete(coupon)
    return not used
