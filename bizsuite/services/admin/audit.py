"""
Admin Audit Log

Append-only record of privileged platform-admin actions. Entries are
added inside the same transaction as the action they describe, so an
action never commits without its audit row.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from bizsuite.core.context import AdminContext
from bizsuite.models.admin import AdminAuditLog
from bizsuite.services.common import paginate
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)


def record(
    db: Session,
    admin: AdminContext,
    action: str,
    target_type: str,
    target_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> AdminAuditLog:
    """Stage an audit entry; the caller's atomic() block commits it."""
    entry = AdminAuditLog(
        admin_id=admin.admin_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        details=details,
    )
    db.add(entry)
    logger.info(
        f"Admin action: {action} {target_type}:{target_id}",
        extra={"admin_id": admin.admin_id}
    )
    return entry


def list_audit_logs(
    db: Session,
    page: int,
    limit: int,
    target_type: Optional[str] = None,
) -> Tuple[List[AdminAuditLog], Dict[str, Any]]:
    query = db.query(AdminAuditLog).options(joinedload(AdminAuditLog.admin))
    if target_type:
        query = query.filter(AdminAuditLog.target_type == target_type)
    return paginate(query.order_by(AdminAuditLog.created_at.desc()), page, limit)
