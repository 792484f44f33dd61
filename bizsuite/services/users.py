"""
User Management Service

CRUD for users within the caller's tenant.

RBAC:
- Create/update/deactivate: owner or admin
- The owner row is never modified here
- Changing a password: own account only
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from bizsuite.core.context import TenantContext
from bizsuite.core.exceptions import ConflictError, InvalidInputError, PermissionDenied
from bizsuite.core.limits import LimitKey
from bizsuite.core.permissions import can_modify_user
from bizsuite.core.security import get_password_hash, verify_password
from bizsuite.database import atomic
from bizsuite.models.user import User, UserRole
from bizsuite.schemas.user import PasswordChange, UserCreate, UserUpdate
from bizsuite.services.capacity import enforce_capacity
from bizsuite.services.common import apply_updates, get_owned, paginate
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)


def _email_taken(db: Session, email: str) -> bool:
    # Emails are unique across all tenants
    return db.query(User.id).filter(User.email == email).first() is not None


def create_user(db: Session, ctx: TenantContext, data: UserCreate) -> User:
    if data.role == UserRole.OWNER:
        raise InvalidInputError(
            "Invalid role",
            details=[{"field": "role", "message": "Role must be admin or staff"}]
        )
    if _email_taken(db, data.email):
        raise ConflictError("Email already exists")

    with atomic(db):
        enforce_capacity(db, ctx.tenant_id, LimitKey.MAX_USERS, User, "users")
        user = User(
            tenant_id=ctx.tenant_id,  # CRITICAL: Set tenant_id
            email=data.email,
            hashed_password=get_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role,
            is_active=True,
        )
        db.add(user)

    logger.info(f"User created: {user.id} by {ctx.user_id}", extra={"tenant_id": ctx.tenant_id})
    return user


def list_users(
    db: Session,
    ctx: TenantContext,
    page: int,
    limit: int,
    role: Optional[UserRole] = None,
    is_active: Optional[bool] = None,
) -> Tuple[List[User], Dict[str, Any]]:
    query = db.query(User).filter(User.tenant_id == ctx.tenant_id)
    if role:
        query = query.filter(User.role == role)
    if is_active is not None:
        query = query.filter(User.is_active == is_active)
    return paginate(query.order_by(User.created_at.desc()), page, limit)


def get_user(db: Session, ctx: TenantContext, user_id: str) -> User:
    return get_owned(db, User, ctx.tenant_id, user_id, "User")


def update_user(db: Session, ctx: TenantContext, user_id: str, data: UserUpdate) -> User:
    user = get_owned(db, User, ctx.tenant_id, user_id, "User")
    if not can_modify_user(ctx.role, user.role):
        raise PermissionDenied("Cannot modify owner user" if user.is_owner else
                               "Not authorized to modify this user")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("role") == UserRole.OWNER:
        raise InvalidInputError(
            "Invalid role",
            details=[{"field": "role", "message": "Role must be admin or staff"}]
        )
    if "email" in changes and changes["email"] != user.email and _email_taken(db, changes["email"]):
        raise ConflictError("Email already exists")
    if changes.get("is_active") is False and user.id == ctx.user_id:
        raise InvalidInputError("Cannot deactivate your own account")

    with atomic(db):
        apply_updates(user, changes)

    logger.info(f"User updated: {user.id} by {ctx.user_id}", extra={"tenant_id": ctx.tenant_id})
    return user


def deactivate_user(db: Session, ctx: TenantContext, user_id: str) -> None:
    """Soft delete: the row stays, is_active goes false."""
    user = get_owned(db, User, ctx.tenant_id, user_id, "User")
    if not can_modify_user(ctx.role, user.role):
        raise PermissionDenied("Cannot delete owner user" if user.is_owner else
                               "Not authorized to delete this user")
    if user.id == ctx.user_id:
        raise InvalidInputError("Cannot deactivate your own account")

    with atomic(db):
        user.is_active = False

    logger.info(f"User deactivated: {user_id} by {ctx.user_id}", extra={"tenant_id": ctx.tenant_id})


def change_password(db: Session, ctx: TenantContext, data: PasswordChange) -> None:
    user = get_owned(db, User, ctx.tenant_id, ctx.user_id, "User")
    if not verify_password(data.current_password, user.hashed_password):
        raise InvalidInputError(
            "Current password is incorrect",
            details=[{"field": "currentPassword", "message": "Current password is incorrect"}]
        )
    with atomic(db):
        user.hashed_password = get_password_hash(data.new_password)
    logger.info(f"Password changed for user {user.id}", extra={"tenant_id": ctx.tenant_id})
