"""Admin System Endpoints: health and the audit log."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bizsuite.api.deps import PageParams, get_admin_context, page_params
from bizsuite.core.context import AdminContext
from bizsuite.database import get_db
from bizsuite.schemas.admin import AuditLogEntry, SystemHealth
from bizsuite.schemas.common import DataResponse, PageResponse
from bizsuite.services.admin import audit as audit_service
from bizsuite.services.admin import system as system_service

router = APIRouter(prefix="/system", tags=["admin"])


@router.get("/health", response_model=DataResponse[SystemHealth])
async def system_health(
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": system_service.system_health(db)}


@router.get("/audit-logs", response_model=PageResponse[AuditLogEntry])
async def audit_logs(
    paging: PageParams = Depends(page_params),
    target_type: Optional[str] = Query(None, alias="type"),
    admin: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db)
):
    logs, pagination = audit_service.list_audit_logs(db, paging.page, paging.limit, target_type)
    return {"success": True, "data": logs, "pagination": pagination}
