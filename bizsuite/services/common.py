"""
Shared Service Helpers

Tenant-scoped lookups and offset pagination used by every resource service.

TENANT_ISOLATION: get_owned() is the only way services load a single
tenant-owned row by id. A row belonging to another tenant is reported as
NotFound, exactly like a missing one.
"""
import math
from typing import Any, Dict, List, Tuple, Type, TypeVar

from sqlalchemy.orm import Query, Session

from bizsuite.core.exceptions import NotFoundError

ModelT = TypeVar("ModelT")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def get_owned(db: Session, model: Type[ModelT], tenant_id: str, entity_id: str, entity: str) -> ModelT:
    """Load ``model`` by id within ``tenant_id`` or raise NotFoundError(entity)."""
    row = db.query(model).filter(
        model.id == entity_id,
        model.tenant_id == tenant_id  # CRITICAL: Tenant isolation
    ).first()
    if row is None:
        raise NotFoundError(entity)
    return row


def paginate(query: Query, page: int, limit: int) -> Tuple[List[Any], Dict[str, int]]:
    """
    Apply offset pagination to an ordered query.

    Returns the page of rows and the ``{total, page, limit, totalPages}``
    block rendered next to ``data`` in list responses.
    """
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return rows, {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def apply_updates(row: Any, changes: Dict[str, Any]) -> None:
    """Copy a partial update (already validated) onto an ORM row."""
    for field, value in changes.items():
        setattr(row, field, value)
