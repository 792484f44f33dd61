"""
Shopping Carts

One active cart per (tenant, customer). Carts are created on first use
and expire after seven days; an expired cart is marked abandoned and a
fresh one replaces it.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session, joinedload

from bizsuite.core.context import TenantContext
from bizsuite.core.exceptions import InvalidInputError, NotFoundError
from bizsuite.database import atomic
from bizsuite.models.ecommerce import Cart, CartItem, CartStatus, EcommerceProduct
from bizsuite.services.ecommerce.coupons import to_decimal

CART_LIFETIME = timedelta(days=7)


def _active_cart(db: Session, ctx: TenantContext):
    return (
        db.query(Cart)
        .options(joinedload(Cart.items).joinedload(CartItem.product))
        .filter(
            Cart.tenant_id == ctx.tenant_id,
            Cart.customer_id == ctx.user_id,
            Cart.status == CartStatus.ACTIVE
        )
        .first()
    )


def get_cart(db: Session, ctx: TenantContext) -> Cart:
    """Return the caller's active cart, creating one if needed."""
    cart = _active_cart(db, ctx)
    now = datetime.utcnow()

    if cart is not None and cart.expires_at is not None and cart.expires_at < now:
        with atomic(db):
            cart.status = CartStatus.ABANDONED
        cart = None

    if cart is None:
        with atomic(db):
            cart = Cart(
                tenant_id=ctx.tenant_id,
                customer_id=ctx.user_id,
                status=CartStatus.ACTIVE,
                expires_at=now + CART_LIFETIME,
            )
            db.add(cart)
    return cart


def _cart_item(db: Session, ctx: TenantContext, item_id: str) -> CartItem:
    item = (
        db.query(CartItem)
        .join(Cart, Cart.id == CartItem.cart_id)
        .filter(
            CartItem.id == item_id,
            CartItem.tenant_id == ctx.tenant_id,
            Cart.customer_id == ctx.user_id,
            Cart.status == CartStatus.ACTIVE
        )
        .first()
    )
    if item is None:
        raise NotFoundError("Cart item")
    return item


def add_item(db: Session, ctx: TenantContext, product_id: str, quantity: int) -> Cart:
    """Add a product at its current price; repeated adds merge quantities."""
    product = db.query(EcommerceProduct).filter(
        EcommerceProduct.id == product_id,
        EcommerceProduct.tenant_id == ctx.tenant_id,
        EcommerceProduct.is_active.is_(True)
    ).first()
    if product is None:
        raise NotFoundError("Product")

    cart = get_cart(db, ctx)
    existing = db.query(CartItem).filter(
        CartItem.cart_id == cart.id,
        CartItem.product_id == product.id
    ).first()

    with atomic(db):
        if existing is not None:
            existing.quantity = existing.quantity + quantity
        else:
            db.add(CartItem(
                tenant_id=ctx.tenant_id,
                cart_id=cart.id,
                product_id=product.id,
                quantity=quantity,
                unit_price=product.price,
            ))
    return _reload(db, cart)


def update_item_quantity(db: Session, ctx: TenantContext, item_id: str, quantity: int) -> Cart:
    item = _cart_item(db, ctx, item_id)
    cart_id = item.cart_id
    with atomic(db):
        if quantity <= 0:
            db.delete(item)
        else:
            item.quantity = quantity
    return _reload(db, db.query(Cart).filter(Cart.id == cart_id).one())


def remove_item(db: Session, ctx: TenantContext, item_id: str) -> Cart:
    return update_item_quantity(db, ctx, item_id, 0)


def clear_cart(db: Session, ctx: TenantContext) -> Cart:
    cart = get_cart(db, ctx)
    with atomic(db):
        db.query(CartItem).filter(
            CartItem.cart_id == cart.id,
            CartItem.tenant_id == ctx.tenant_id
        ).delete(synchronize_session=False)
    return _reload(db, cart)


def cart_totals(db: Session, ctx: TenantContext) -> Dict[str, Any]:
    cart = get_cart(db, ctx)
    subtotal = sum(
        (to_decimal(item.unit_price) * item.quantity for item in cart.items),
        Decimal("0")
    )
    return {
        "subtotal": float(subtotal),
        "item_count": sum(item.quantity for item in cart.items),
    }


def require_items(cart: Cart) -> None:
    if not cart.items:
        raise InvalidInputError("Cart is empty")


def _reload(db: Session, cart: Cart) -> Cart:
    db.refresh(cart)
    return cart
