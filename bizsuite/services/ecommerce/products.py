"""
Storefront Products

Catalog products sold through the online store. Creation counts against
the plan's maxProducts, measured over this catalog.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from bizsuite.core.context import TenantContext
from bizsuite.core.exceptions import ConflictError, NotFoundError
from bizsuite.core.limits import LimitKey
from bizsuite.database import atomic
from bizsuite.models.ecommerce import CartItem, Category, EcommerceProduct, OrderItem
from bizsuite.schemas.ecommerce import StoreProductCreate, StoreProductUpdate
from bizsuite.services.capacity import enforce_capacity
from bizsuite.services.common import apply_updates, get_owned, paginate
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)

SORTABLE = {
    "createdAt": EcommerceProduct.created_at,
    "price": EcommerceProduct.price,
    "name": EcommerceProduct.name,
    "stockQuantity": EcommerceProduct.stock_quantity,
}


def _slug_taken(db: Session, tenant_id: str, slug: str, exclude_id: str = None) -> bool:
    query = db.query(EcommerceProduct.id).filter(
        EcommerceProduct.tenant_id == tenant_id,
        EcommerceProduct.slug == slug
    )
    if exclude_id:
        query = query.filter(EcommerceProduct.id != exclude_id)
    return query.first() is not None


def _check_category(db: Session, tenant_id: str, category_id: str) -> None:
    exists = db.query(Category.id).filter(
        Category.id == category_id,
        Category.tenant_id == tenant_id
    ).first()
    if exists is None:
        raise NotFoundError("Category")


def list_products(
    db: Session,
    ctx: TenantContext,
    page: int,
    limit: int,
    category_id: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_featured: Optional[bool] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    in_stock: bool = False,
    search: Optional[str] = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> Tuple[List[EcommerceProduct], Dict[str, Any]]:
    query = db.query(EcommerceProduct).options(joinedload(EcommerceProduct.category)).filter(
        EcommerceProduct.tenant_id == ctx.tenant_id
    )

    if category_id:
        query = query.filter(EcommerceProduct.category_id == category_id)
    if is_active is not None:
        query = query.filter(EcommerceProduct.is_active == is_active)
    if is_featured is not None:
        query = query.filter(EcommerceProduct.is_featured == is_featured)
    if min_price is not None:
        query = query.filter(EcommerceProduct.price >= min_price)
    if max_price is not None:
        query = query.filter(EcommerceProduct.price <= max_price)
    if in_stock:
        query = query.filter(EcommerceProduct.stock_quantity > 0)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            EcommerceProduct.name.ilike(pattern),
            EcommerceProduct.description.ilike(pattern),
            EcommerceProduct.sku.ilike(pattern),
        ))

    column = SORTABLE.get(sort_by, EcommerceProduct.created_at)
    ordering = column.asc() if sort_order == "asc" else column.desc()
    return paginate(query.order_by(ordering), page, limit)


def get_product(db: Session, ctx: TenantContext, product_id: str) -> EcommerceProduct:
    return get_owned(db, EcommerceProduct, ctx.tenant_id, product_id, "Product")


def get_product_by_slug(db: Session, ctx: TenantContext, slug: str) -> EcommerceProduct:
    product = db.query(EcommerceProduct).filter(
        EcommerceProduct.tenant_id == ctx.tenant_id,
        EcommerceProduct.slug == slug
    ).first()
    if product is None:
        raise NotFoundError("Product")
    return product


def featured_products(db: Session, ctx: TenantContext, limit: int = 10) -> List[EcommerceProduct]:
    return db.query(EcommerceProduct).filter(
        EcommerceProduct.tenant_id == ctx.tenant_id,
        EcommerceProduct.is_featured.is_(True),
        EcommerceProduct.is_active.is_(True)
    ).order_by(EcommerceProduct.created_at.desc()).limit(limit).all()


def low_stock_products(db: Session, ctx: TenantContext) -> List[EcommerceProduct]:
    return db.query(EcommerceProduct).filter(
        EcommerceProduct.tenant_id == ctx.tenant_id,
        EcommerceProduct.stock_quantity <= EcommerceProduct.low_stock_threshold
    ).order_by(EcommerceProduct.stock_quantity.asc()).all()


def create_product(db: Session, ctx: TenantContext, data: StoreProductCreate) -> EcommerceProduct:
    if _slug_taken(db, ctx.tenant_id, data.slug):
        raise ConflictError("Product with this slug already exists")
    if data.category_id:
        _check_category(db, ctx.tenant_id, data.category_id)

    with atomic(db):
        enforce_capacity(db, ctx.tenant_id, LimitKey.MAX_PRODUCTS, EcommerceProduct, "products")
        product = EcommerceProduct(tenant_id=ctx.tenant_id, **data.model_dump())
        db.add(product)

    logger.info(f"Store product created: {product.slug}", extra={"tenant_id": ctx.tenant_id})
    return product


def update_product(
    db: Session,
    ctx: TenantContext,
    product_id: str,
    data: StoreProductUpdate,
) -> EcommerceProduct:
    product = get_owned(db, EcommerceProduct, ctx.tenant_id, product_id, "Product")
    changes = data.model_dump(exclude_unset=True)

    if "slug" in changes and changes["slug"] != product.slug and \
            _slug_taken(db, ctx.tenant_id, changes["slug"], product.id):
        raise ConflictError("Product with this slug already exists")
    if changes.get("category_id"):
        _check_category(db, ctx.tenant_id, changes["category_id"])

    with atomic(db):
        apply_updates(product, changes)
    db.refresh(product)
    return product


def delete_product(db: Session, ctx: TenantContext, product_id: str) -> None:
    """
    Delete a product.

    Cart lines holding it are removed; order lines keep their copied
    name and price and lose only the product link.
    """
    product = get_owned(db, EcommerceProduct, ctx.tenant_id, product_id, "Product")
    with atomic(db):
        db.query(CartItem).filter(
            CartItem.tenant_id == ctx.tenant_id,
            CartItem.product_id == product.id
        ).delete(synchronize_session=False)
        db.query(OrderItem).filter(
            OrderItem.tenant_id == ctx.tenant_id,
            OrderItem.product_id == product.id
        ).update({OrderItem.product_id: None}, synchronize_session=False)
        db.delete(product)
    logger.info(f"Store product deleted: {product_id}", extra={"tenant_id": ctx.tenant_id})


def set_stock(db: Session, ctx: TenantContext, product_id: str, quantity: int) -> EcommerceProduct:
    product = get_owned(db, EcommerceProduct, ctx.tenant_id, product_id, "Product")
    with atomic(db):
        product.stock_quantity = quantity
    return product
