"""
Platform Admin Authentication

Admins live in their own table and receive tokens signed with a separate
secret. A tenant token is never accepted here and vice versa.
"""
from typing import Any, Dict

from sqlalchemy.orm import Session

from bizsuite.core.context import AdminContext
from bizsuite.core.exceptions import AuthenticationError, NotFoundError
from bizsuite.core.security import create_admin_token, decode_admin_token, verify_password
from bizsuite.database import atomic
from bizsuite.models.admin import PlatformAdmin
from bizsuite.services.admin.audit import record
from bizsuite.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)


def login(db: Session, email: str, password: str) -> Dict[str, Any]:
    admin = db.query(PlatformAdmin).filter(PlatformAdmin.email == email).first()

    if admin is None or not admin.is_active or not verify_password(password, admin.password_hash):
        log_security_event("failed_login", {"reason": "admin_invalid_credentials", "email": email}, logger)
        raise AuthenticationError("Invalid credentials")

    token = create_admin_token({"sub": admin.id, "email": admin.email, "role": admin.role})
    ctx = AdminContext(admin_id=admin.id, email=admin.email, role=admin.role)
    with atomic(db):
        record(db, ctx, "login", "system", details={"method": "email_password"})

    return {"token": token, "token_type": "bearer", "admin": admin}


def resolve_admin(db: Session, token: str) -> AdminContext:
    """Validate an admin bearer token against an active PlatformAdmin row."""
    payload = decode_admin_token(token)
    if not payload or not payload.get("sub"):
        log_security_event("invalid_token", {"reason": "admin_token_rejected"}, logger)
        raise AuthenticationError("Invalid or expired admin token")

    admin = db.query(PlatformAdmin).filter(PlatformAdmin.id == payload["sub"]).first()
    if admin is None or not admin.is_active:
        log_security_event("invalid_token", {"reason": "admin_inactive", "admin_id": payload["sub"]}, logger)
        raise AuthenticationError("Invalid or expired admin token")

    return AdminContext(admin_id=admin.id, email=admin.email, role=admin.role)


def get_profile(db: Session, admin: AdminContext) -> PlatformAdmin:
    row = db.query(PlatformAdmin).filter(PlatformAdmin.id == admin.admin_id).first()
    if row is None:
        raise NotFoundError("Admin")
    return row
