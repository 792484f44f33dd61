"""
Storefront Categories

A per-tenant category tree. Parents must belong to the same tenant and a
category with children or products cannot be deleted.
"""
from typing import List

from sqlalchemy.orm import Session

from bizsuite.core.context import TenantContext
from bizsuite.core.exceptions import ConflictError, DependencyExistsError, InvalidInputError, NotFoundError
from bizsuite.database import atomic
from bizsuite.models.ecommerce import Category, EcommerceProduct
from bizsuite.schemas.ecommerce import CategoryCreate, CategoryOrder, CategoryUpdate
from bizsuite.services.common import apply_updates, get_owned
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)


def _slug_taken(db: Session, tenant_id: str, slug: str, exclude_id: str = None) -> bool:
    query = db.query(Category.id).filter(Category.tenant_id == tenant_id, Category.slug == slug)
    if exclude_id:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


def _check_parent(db: Session, tenant_id: str, parent_id: str) -> Category:
    # A parent in another tenant is reported as missing
    parent = db.query(Category).filter(
        Category.id == parent_id,
        Category.tenant_id == tenant_id
    ).first()
    if parent is None:
        raise NotFoundError("Parent category")
    return parent


def _is_descendant(db: Session, tenant_id: str, node: Category, ancestor_id: str) -> bool:
    """True when ``ancestor_id`` appears on the parent chain of ``node``."""
    seen = set()
    while node is not None and node.id not in seen:
        if node.id == ancestor_id:
            return True
        seen.add(node.id)
        if node.parent_id is None:
            return False
        node = db.query(Category).filter(
            Category.id == node.parent_id,
            Category.tenant_id == tenant_id
        ).first()
    return False


def list_categories(db: Session, ctx: TenantContext) -> List[Category]:
    return db.query(Category).filter(
        Category.tenant_id == ctx.tenant_id
    ).order_by(Category.sort_order.asc(), Category.name.asc()).all()


def category_tree(db: Session, ctx: TenantContext) -> List[Category]:
    """Root categories; children hang off the ``children`` relationship."""
    return db.query(Category).filter(
        Category.tenant_id == ctx.tenant_id,
        Category.parent_id.is_(None)
    ).order_by(Category.sort_order.asc(), Category.name.asc()).all()


def get_category(db: Session, ctx: TenantContext, category_id: str) -> Category:
    return get_owned(db, Category, ctx.tenant_id, category_id, "Category")


def create_category(db: Session, ctx: TenantContext, data: CategoryCreate) -> Category:
    if data.parent_id:
        _check_parent(db, ctx.tenant_id, data.parent_id)
    if _slug_taken(db, ctx.tenant_id, data.slug):
        raise ConflictError("Category with this slug already exists")

    with atomic(db):
        category = Category(tenant_id=ctx.tenant_id, **data.model_dump())
        db.add(category)
    logger.info(f"Category created: {category.slug}", extra={"tenant_id": ctx.tenant_id})
    return category


def update_category(db: Session, ctx: TenantContext, category_id: str, data: CategoryUpdate) -> Category:
    category = get_owned(db, Category, ctx.tenant_id, category_id, "Category")
    changes = data.model_dump(exclude_unset=True)

    if changes.get("parent_id") == category.id:
        raise InvalidInputError(
            "Category cannot be its own parent",
            details=[{"field": "parentId", "message": "Category cannot be its own parent"}]
        )
    if changes.get("parent_id"):
        parent = _check_parent(db, ctx.tenant_id, changes["parent_id"])
        if _is_descendant(db, ctx.tenant_id, parent, category.id):
            raise InvalidInputError(
                "Category cannot be moved under its own subcategory",
                details=[{"field": "parentId", "message": "Parent is a subcategory of this category"}]
            )
    if "slug" in changes and changes["slug"] != category.slug and \
            _slug_taken(db, ctx.tenant_id, changes["slug"], category.id):
        raise ConflictError("Category with this slug already exists")

    with atomic(db):
        apply_updates(category, changes)
    return category


def delete_category(db: Session, ctx: TenantContext, category_id: str) -> None:
    category = get_owned(db, Category, ctx.tenant_id, category_id, "Category")

    has_children = db.query(Category.id).filter(
        Category.tenant_id == ctx.tenant_id,
        Category.parent_id == category.id
    ).first() is not None
    if has_children:
        raise DependencyExistsError("category", "subcategories")

    has_products = db.query(EcommerceProduct.id).filter(
        EcommerceProduct.tenant_id == ctx.tenant_id,
        EcommerceProduct.category_id == category.id
    ).first() is not None
    if has_products:
        raise DependencyExistsError("category", "products")

    with atomic(db):
        db.delete(category)
    logger.info(f"Category deleted: {category_id}", extra={"tenant_id": ctx.tenant_id})


def reorder_categories(db: Session, ctx: TenantContext, items: List[CategoryOrder]) -> int:
    """Apply new sort orders; ids from other tenants are ignored."""
    updated = 0
    with atomic(db):
        for item in items:
            updated += db.query(Category).filter(
                Category.id == item.id,
                Category.tenant_id == ctx.tenant_id
            ).update({Category.sort_order: item.sort_order}, synchronize_session=False)
    return updated
