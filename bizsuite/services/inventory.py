"""
Inventory Service

Products, stock adjustments and the movement log.

Stock never goes below zero: adjustments are a single conditional UPDATE
whose WHERE clause carries the guard, so concurrent sales cannot
oversell.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from bizsuite.core.context import TenantContext
from bizsuite.core.exceptions import ConflictError
from bizsuite.core.limits import LimitKey
from bizsuite.database import atomic
from bizsuite.models.inventory import MovementType, Product, StockMovement
from bizsuite.schemas.inventory import ProductCreate, ProductUpdate, StockAdjustment
from bizsuite.services.capacity import enforce_capacity
from bizsuite.services.common import apply_updates, get_owned, paginate
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)


def create_product(db: Session, ctx: TenantContext, data: ProductCreate) -> Product:
    """Create a product, checked against the plan's maxProducts."""
    with atomic(db):
        enforce_capacity(db, ctx.tenant_id, LimitKey.MAX_PRODUCTS, Product, "products")

        product = Product(
            tenant_id=ctx.tenant_id,  # CRITICAL: Set tenant_id
            created_by=ctx.user_id,
            **data.model_dump()
        )
        db.add(product)
        db.flush()

        if data.stock_quantity > 0:
            db.add(StockMovement(
                tenant_id=ctx.tenant_id,
                product_id=product.id,
                quantity=data.stock_quantity,
                movement_type=MovementType.ADJUSTMENT,
                notes="Initial stock",
                created_by=ctx.user_id,
            ))

    logger.info(f"Product created: {product.id} by {ctx.user_id}", extra={"tenant_id": ctx.tenant_id})
    return product


def list_products(
    db: Session,
    ctx: TenantContext,
    page: int,
    limit: int,
    category: Optional[str] = None,
    low_stock: bool = False,
    search: Optional[str] = None,
) -> Tuple[List[Product], Dict[str, Any]]:
    query = db.query(Product).filter(Product.tenant_id == ctx.tenant_id)

    if category:
        query = query.filter(Product.category == category)
    if low_stock:
        query = query.filter(Product.stock_quantity <= Product.low_stock_threshold)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Product.name.ilike(pattern),
            Product.sku.ilike(pattern),
            Product.description.ilike(pattern),
        ))

    return paginate(query.order_by(Product.created_at.desc()), page, limit)


def get_product(db: Session, ctx: TenantContext, product_id: str) -> Product:
    return get_owned(db, Product, ctx.tenant_id, product_id, "Product")


def update_product(db: Session, ctx: TenantContext, product_id: str, data: ProductUpdate) -> Product:
    product = get_owned(db, Product, ctx.tenant_id, product_id, "Product")
    with atomic(db):
        apply_updates(product, data.model_dump(exclude_unset=True))
    return product


def delete_product(db: Session, ctx: TenantContext, product_id: str) -> None:
    product = get_owned(db, Product, ctx.tenant_id, product_id, "Product")
    with atomic(db):
        # Movements go with the product (delete-orphan cascade)
        db.delete(product)
    logger.info(f"Product deleted: {product_id} by {ctx.user_id}", extra={"tenant_id": ctx.tenant_id})


def adjust_stock(
    db: Session,
    ctx: TenantContext,
    product_id: str,
    data: StockAdjustment,
) -> Tuple[Product, StockMovement]:
    """
    Apply a signed stock change and log it as a movement.

    The UPDATE only matches while the result stays >= 0; zero rows
    updated means the stock was insufficient.
    """
    product = get_owned(db, Product, ctx.tenant_id, product_id, "Product")

    with atomic(db):
        updated = db.query(Product).filter(
            Product.id == product.id,
            Product.tenant_id == ctx.tenant_id,
            Product.stock_quantity + data.quantity >= 0
        ).update(
            {
                Product.stock_quantity: Product.stock_quantity + data.quantity,
                Product.updated_at: datetime.utcnow(),
            },
            synchronize_session=False
        )
        if updated == 0:
            raise ConflictError("Insufficient stock. Cannot reduce below zero.")

        movement = StockMovement(
            tenant_id=ctx.tenant_id,
            product_id=product.id,
            quantity=data.quantity,
            movement_type=data.movement_type,
            notes=data.notes,
            created_by=ctx.user_id,
        )
        db.add(movement)

    db.refresh(product)
    logger.info(
        f"Stock adjusted: product={product.id} delta={data.quantity} ({data.movement_type.value})",
        extra={"tenant_id": ctx.tenant_id, "user_id": ctx.user_id}
    )
    return product, movement


def low_stock_products(db: Session, ctx: TenantContext) -> List[Product]:
    return db.query(Product).filter(
        Product.tenant_id == ctx.tenant_id,
        Product.stock_quantity <= Product.low_stock_threshold
    ).order_by(Product.stock_quantity.asc()).all()


def inventory_stats(db: Session, ctx: TenantContext) -> Dict[str, Any]:
    base = db.query(Product).filter(Product.tenant_id == ctx.tenant_id)

    total_units = db.query(func.coalesce(func.sum(Product.stock_quantity), 0)).filter(
        Product.tenant_id == ctx.tenant_id
    ).scalar()

    category_rows = db.query(Product.category, func.count(Product.id)).filter(
        Product.tenant_id == ctx.tenant_id
    ).group_by(Product.category).all()

    return {
        "total_products": base.count(),
        "low_stock_count": base.filter(Product.stock_quantity <= Product.low_stock_threshold).count(),
        "total_stock_units": int(total_units or 0),
        "category_counts": [
            {"category": category or "Uncategorized", "count": count}
            for category, count in category_rows
        ],
    }


def stock_history(
    db: Session,
    ctx: TenantContext,
    page: int,
    limit: int,
    product_id: Optional[str] = None,
) -> Tuple[List[StockMovement], Dict[str, Any]]:
    query = db.query(StockMovement).options(joinedload(StockMovement.product)).filter(
        StockMovement.tenant_id == ctx.tenant_id
    )
    if product_id:
        query = query.filter(StockMovement.product_id == product_id)
    return paginate(query.order_by(StockMovement.created_at.desc()), page, limit)
