"""
Hotel Endpoints

Tables and reservations for the caller's tenant.
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bizsuite.api.deps import PageParams, page_params, require_any_role, require_managers
from bizsuite.core.context import TenantContext
from bizsuite.database import get_db
from bizsuite.models.hotel import ReservationStatus, TableStatus
from bizsuite.schemas.common import DataResponse, MessageData, PageResponse
from bizsuite.schemas.hotel import (
    HotelStats,
    ReservationCreate,
    ReservationResponse,
    ReservationUpdate,
    TableCreate,
    TableResponse,
    TableUpdate,
)
from bizsuite.services import hotel as hotel_service

router = APIRouter(prefix="/hotel", tags=["hotel"])


# Tables

@router.post("/tables", response_model=DataResponse[TableResponse], status_code=status.HTTP_201_CREATED)
async def create_table(
    data: TableCreate,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    """Counts against the plan's maxTables limit (409 when full)."""
    return {"success": True, "data": hotel_service.create_table(db, ctx, data)}


@router.get("/tables", response_model=DataResponse[List[TableResponse]])
async def list_tables(
    table_status: Optional[TableStatus] = Query(None, alias="status"),
    floor: Optional[str] = Query(None),
    section: Optional[str] = Query(None),
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": hotel_service.list_tables(db, ctx, table_status, floor, section)}


@router.get("/tables/{table_id}", response_model=DataResponse[TableResponse])
async def get_table(
    table_id: str,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": hotel_service.get_table(db, ctx, table_id)}


@router.put("/tables/{table_id}", response_model=DataResponse[TableResponse])
async def update_table(
    table_id: str,
    data: TableUpdate,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": hotel_service.update_table(db, ctx, table_id, data)}


@router.delete("/tables/{table_id}", response_model=DataResponse[MessageData])
async def delete_table(
    table_id: str,
    ctx: TenantContext = Depends(require_managers),
    db: Session = Depends(get_db)
):
    """409 while the table has pending or confirmed reservations."""
    hotel_service.delete_table(db, ctx, table_id)
    return {"success": True, "data": {"message": "Table deleted successfully"}}


# Reservations

@router.post("/reservations", response_model=DataResponse[ReservationResponse], status_code=status.HTTP_201_CREATED)
async def create_reservation(
    data: ReservationCreate,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    """409 when the table is already booked within an hour of the requested time."""
    return {"success": True, "data": hotel_service.create_reservation(db, ctx, data)}


@router.get("/reservations", response_model=PageResponse[ReservationResponse])
async def list_reservations(
    paging: PageParams = Depends(page_params),
    reservation_status: Optional[ReservationStatus] = Query(None, alias="status"),
    on_date: Optional[date] = Query(None, alias="date"),
    table_id: Optional[str] = Query(None, alias="tableId"),
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    reservations, pagination = hotel_service.list_reservations(
        db, ctx, paging.page, paging.limit, reservation_status, on_date, table_id
    )
    return {"success": True, "data": reservations, "pagination": pagination}


@router.get("/reservations/{reservation_id}", response_model=DataResponse[ReservationResponse])
async def get_reservation(
    reservation_id: str,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": hotel_service.get_reservation(db, ctx, reservation_id)}


@router.put("/reservations/{reservation_id}", response_model=DataResponse[ReservationResponse])
async def update_reservation(
    reservation_id: str,
    data: ReservationUpdate,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": hotel_service.update_reservation(db, ctx, reservation_id, data)}


@router.delete("/reservations/{reservation_id}", response_model=DataResponse[ReservationResponse])
async def cancel_reservation(
    reservation_id: str,
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    """Cancels rather than deletes."""
    return {"success": True, "data": hotel_service.cancel_reservation(db, ctx, reservation_id)}


@router.get("/stats", response_model=DataResponse[HotelStats])
async def hotel_stats(
    ctx: TenantContext = Depends(require_any_role),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": hotel_service.hotel_stats(db, ctx)}
