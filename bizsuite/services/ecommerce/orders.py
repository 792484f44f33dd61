"""
Orders

Checkout turns the caller's active cart into an order in one transaction:
the coupon use is claimed, stock is decremented and the cart is converted,
or nothing changes at all.
"""
import random
import string
import time
from datetime import date, datetime, time as dtime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from bizsuite.core.context import TenantContext
from bizsuite.core.exceptions import ConflictError, InvalidInputError
from bizsuite.database import atomic
from bizsuite.models.ecommerce import (
    CartStatus, EcommerceProduct, Order, OrderItem, OrderStatus,
)
from bizsuite.schemas.ecommerce import CheckoutRequest
from bizsuite.services.common import get_owned, paginate
from bizsuite.services.ecommerce.carts import get_cart, require_items
from bizsuite.services.ecommerce.coupons import claim_coupon, evaluate_coupon, find_coupon, to_decimal
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)

NOT_CANCELLABLE = (OrderStatus.SHIPPED, OrderStatus.DELIVERED)
NON_REVENUE = (OrderStatus.CANCELLED, OrderStatus.REFUNDED)
FINAL_STATUSES = NON_REVENUE
BILLING_FIELDS = ("name", "address_line1", "address_line2", "city", "state", "postal_code", "country")

_BASE36 = string.digits + string.ascii_uppercase


def _base36(number: int) -> str:
    digits = ""
    while number:
        number, remainder = divmod(number, 36)
        digits = _BASE36[remainder] + digits
    return digits or "0"


def generate_order_number() -> str:
    """ORD-<base36 millisecond timestamp>-<4 random characters>."""
    stamp = _base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_BASE36, k=4))
    return f"ORD-{stamp}-{suffix}"


def _decrement_stock(db: Session, tenant_id: str, product_id: str, quantity: int, name: str) -> None:
    updated = db.query(EcommerceProduct).filter(
        EcommerceProduct.id == product_id,
        EcommerceProduct.tenant_id == tenant_id,
        EcommerceProduct.stock_quantity >= quantity
    ).update(
        {EcommerceProduct.stock_quantity: EcommerceProduct.stock_quantity - quantity},
        synchronize_session=False
    )
    if updated == 0:
        raise ConflictError(f"Insufficient stock for {name}")


def _restore_stock(db: Session, tenant_id: str, product_id: str, quantity: int) -> None:
    db.query(EcommerceProduct).filter(
        EcommerceProduct.id == product_id,
        EcommerceProduct.tenant_id == tenant_id
    ).update(
        {EcommerceProduct.stock_quantity: EcommerceProduct.stock_quantity + quantity},
        synchronize_session=False
    )


def checkout(db: Session, ctx: TenantContext, data: CheckoutRequest) -> Order:
    """
    Place an order from the caller's active cart.

    An invalid coupon rejects the checkout rather than silently dropping
    the discount. Billing fields not supplied are copied from shipping.
    """
    cart = get_cart(db, ctx)
    require_items(cart)

    subtotal = Decimal("0")
    lines = []
    for item in cart.items:
        if not item.product.is_active:
            message = f"{item.product.name} is no longer available"
            raise InvalidInputError(message, details=[{"field": "items", "message": message}])
        unit_price = to_decimal(item.unit_price)
        line_total = unit_price * item.quantity
        subtotal += line_total
        lines.append((item, unit_price, line_total))

    coupon = None
    discount = Decimal("0")
    if data.coupon_code:
        coupon = find_coupon(db, ctx.tenant_id, data.coupon_code)
        check = evaluate_coupon(coupon, subtotal, datetime.utcnow())
        if not check.valid:
            raise InvalidInputError(
                check.error,
                details=[{"field": "couponCode", "message": check.error}]
            )
        discount = check.discount

    tax_amount = Decimal("0")
    shipping_amount = Decimal("0")
    total = subtotal + tax_amount + shipping_amount - discount

    fields = data.model_dump(exclude={"coupon_code"})
    for suffix in BILLING_FIELDS:
        if not fields.get(f"billing_{suffix}"):
            fields[f"billing_{suffix}"] = fields.get(f"shipping_{suffix}")

    with atomic(db):
        if coupon is not None:
            claim_coupon(db, coupon)

        order = Order(
            tenant_id=ctx.tenant_id,
            customer_id=ctx.user_id,
            order_number=generate_order_number(),
            status=OrderStatus.PENDING,
            subtotal=subtotal,
            tax_amount=tax_amount,
            shipping_amount=shipping_amount,
            discount_amount=discount,
            total=total,
            coupon_id=coupon.id if coupon is not None else None,
            **fields
        )
        db.add(order)
        db.flush()

        for item, unit_price, line_total in lines:
            _decrement_stock(db, ctx.tenant_id, item.product_id, item.quantity, item.product.name)
            db.add(OrderItem(
                tenant_id=ctx.tenant_id,
                order_id=order.id,
                product_id=item.product_id,
                product_name=item.product.name,
                sku=item.product.sku,
                quantity=item.quantity,
                unit_price=unit_price,
                total_price=line_total,
            ))

        cart.status = CartStatus.CONVERTED

    logger.info(
        f"Order placed: {order.order_number} total={total}",
        extra={"tenant_id": ctx.tenant_id, "user_id": ctx.user_id}
    )
    return get_order(db, ctx, order.id)


def _start_of(day: date) -> datetime:
    return datetime.combine(day, dtime.min)


def _end_of(day: date) -> datetime:
    return datetime.combine(day, dtime.max)


def list_orders(
    db: Session,
    ctx: TenantContext,
    page: int,
    limit: int,
    status: Optional[OrderStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    customer_id: Optional[str] = None,
    search: Optional[str] = None,
) -> Tuple[List[Order], Dict[str, Any]]:
    query = db.query(Order).options(selectinload(Order.items)).filter(
        Order.tenant_id == ctx.tenant_id
    )

    if status:
        query = query.filter(Order.status == status)
    if start_date:
        query = query.filter(Order.created_at >= _start_of(start_date))
    if end_date:
        query = query.filter(Order.created_at <= _end_of(end_date))
    if customer_id:
        query = query.filter(Order.customer_id == customer_id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Order.order_number.ilike(pattern),
            Order.shipping_name.ilike(pattern),
        ))

    return paginate(query.order_by(Order.created_at.desc()), page, limit)


def get_order(db: Session, ctx: TenantContext, order_id: str) -> Order:
    return get_owned(db, Order, ctx.tenant_id, order_id, "Order")


def update_status(db: Session, ctx: TenantContext, order_id: str, status: OrderStatus) -> Order:
    """
    Move an order along its fulfilment flow.

    Cancelled and refunded orders are final. Cancelling goes through
    cancel_order so the stock is put back.
    """
    order = get_owned(db, Order, ctx.tenant_id, order_id, "Order")
    if order.status in FINAL_STATUSES:
        raise ConflictError(f"Order is {order.status.value} and can no longer change status")
    if status == OrderStatus.CANCELLED:
        return cancel_order(db, ctx, order_id)

    with atomic(db):
        order.status = status
        if status == OrderStatus.SHIPPED:
            order.shipped_at = datetime.utcnow()
        elif status == OrderStatus.DELIVERED:
            order.delivered_at = datetime.utcnow()
    logger.info(f"Order {order.order_number} -> {status.value}", extra={"tenant_id": ctx.tenant_id})
    return order


def cancel_order(db: Session, ctx: TenantContext, order_id: str) -> Order:
    """Cancel an order that has not shipped and put its stock back."""
    order = get_owned(db, Order, ctx.tenant_id, order_id, "Order")
    if order.status in NOT_CANCELLABLE:
        raise ConflictError("Cannot cancel shipped or delivered orders")
    if order.status in FINAL_STATUSES:
        raise ConflictError(f"Order is already {order.status.value}")

    with atomic(db):
        for item in order.items:
            if item.product_id:
                _restore_stock(db, ctx.tenant_id, item.product_id, item.quantity)
        order.status = OrderStatus.CANCELLED

    logger.info(f"Order cancelled: {order.order_number}", extra={"tenant_id": ctx.tenant_id})
    return order


def sales_summary(
    db: Session,
    ctx: TenantContext,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Dict[str, Any]:
    """Revenue over orders that were not cancelled or refunded."""
    query = db.query(Order).filter(Order.tenant_id == ctx.tenant_id)
    if start_date:
        query = query.filter(Order.created_at >= _start_of(start_date))
    if end_date:
        query = query.filter(Order.created_at <= _end_of(end_date))

    by_status = query.with_entities(Order.status, func.count(Order.id)).group_by(Order.status).all()
    totals = query.filter(Order.status.notin_(NON_REVENUE)).with_entities(
        func.coalesce(func.sum(Order.total), 0), func.count(Order.id)
    ).one()

    revenue = to_decimal(totals[0])
    count = totals[1]
    return {
        "total_orders": count,
        "total_revenue": float(revenue),
        "average_order_value": float(revenue / count) if count else 0.0,
        "orders_by_status": [{"status": status, "count": n} for status, n in by_status],
    }


def top_products(db: Session, ctx: TenantContext, limit: int = 10) -> List[Dict[str, Any]]:
    rows = (
        db.query(
            OrderItem.product_id,
            func.max(OrderItem.product_name),
            func.sum(OrderItem.quantity),
            func.sum(OrderItem.total_price),
        )
        .join(Order, Order.id == OrderItem.order_id)
        .filter(
            OrderItem.tenant_id == ctx.tenant_id,
            Order.tenant_id == ctx.tenant_id,
            Order.status.notin_(NON_REVENUE),
            OrderItem.product_id.isnot(None)
        )
        .group_by(OrderItem.product_id)
        .all()
    )
    ranked = sorted(rows, key=lambda row: to_decimal(row[3] or 0), reverse=True)[:limit]
    return [
        {
            "product_id": product_id,
            "product_name": name,
            "quantity_sold": int(quantity or 0),
            "revenue": float(to_decimal(revenue or 0)),
        }
        for product_id, name, quantity, revenue in ranked
    ]
