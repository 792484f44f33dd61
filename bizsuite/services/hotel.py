"""
Hotel Service

Dining tables and reservations.

A table holds at most one active (pending/confirmed) reservation within
an hour either side of any given booking time.
"""
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from bizsuite.core.context import TenantContext
from bizsuite.core.exceptions import ConflictError, DependencyExistsError
from bizsuite.core.limits import LimitKey
from bizsuite.database import atomic
from bizsuite.models.hotel import (
    ACTIVE_RESERVATION_STATUSES,
    HotelTable,
    Reservation,
    ReservationStatus,
    TableStatus,
)
from bizsuite.schemas.hotel import ReservationCreate, ReservationUpdate, TableCreate, TableUpdate
from bizsuite.services.capacity import enforce_capacity
from bizsuite.services.common import apply_updates, get_owned, paginate
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)

BOOKING_WINDOW = timedelta(hours=1)


def _table_number_taken(db: Session, tenant_id: str, table_number: str, exclude_id: str = None) -> bool:
    query = db.query(HotelTable.id).filter(
        HotelTable.tenant_id == tenant_id,
        HotelTable.table_number == table_number
    )
    if exclude_id:
        query = query.filter(HotelTable.id != exclude_id)
    return query.first() is not None


def _table_payload(table: HotelTable, next_reservation: Optional[Reservation]) -> Dict[str, Any]:
    return {
        "id": table.id,
        "table_number": table.table_number,
        "capacity": table.capacity,
        "status": table.status,
        "floor": table.floor,
        "section": table.section,
        "created_at": table.created_at,
        "next_reservation": next_reservation,
    }


def _next_reservation(db: Session, tenant_id: str, table_id: str) -> Optional[Reservation]:
    return db.query(Reservation).filter(
        Reservation.tenant_id == tenant_id,
        Reservation.table_id == table_id,
        Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
        Reservation.reservation_time >= datetime.utcnow()
    ).order_by(Reservation.reservation_time.asc()).first()


# Tables

def create_table(db: Session, ctx: TenantContext, data: TableCreate) -> HotelTable:
    with atomic(db):
        enforce_capacity(db, ctx.tenant_id, LimitKey.MAX_TABLES, HotelTable, "tables")
        if _table_number_taken(db, ctx.tenant_id, data.table_number):
            raise ConflictError("Table number already exists")
        table = HotelTable(tenant_id=ctx.tenant_id, **data.model_dump())
        db.add(table)

    logger.info(f"Table created: {table.table_number}", extra={"tenant_id": ctx.tenant_id})
    return table


def list_tables(
    db: Session,
    ctx: TenantContext,
    status: Optional[TableStatus] = None,
    floor: Optional[str] = None,
    section: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Tables ordered by number, each with its next upcoming active reservation."""
    query = db.query(HotelTable).filter(HotelTable.tenant_id == ctx.tenant_id)
    if status:
        query = query.filter(HotelTable.status == status)
    if floor:
        query = query.filter(HotelTable.floor == floor)
    if section:
        query = query.filter(HotelTable.section == section)

    return [
        _table_payload(table, _next_reservation(db, ctx.tenant_id, table.id))
        for table in query.order_by(HotelTable.table_number.asc()).all()
    ]


def get_table(db: Session, ctx: TenantContext, table_id: str) -> Dict[str, Any]:
    table = get_owned(db, HotelTable, ctx.tenant_id, table_id, "Table")
    return _table_payload(table, _next_reservation(db, ctx.tenant_id, table.id))


def update_table(db: Session, ctx: TenantContext, table_id: str, data: TableUpdate) -> HotelTable:
    table = get_owned(db, HotelTable, ctx.tenant_id, table_id, "Table")
    changes = data.model_dump(exclude_unset=True)
    if "table_number" in changes and _table_number_taken(db, ctx.tenant_id, changes["table_number"], table.id):
        raise ConflictError("Table number already exists")
    with atomic(db):
        apply_updates(table, changes)
    return table


def delete_table(db: Session, ctx: TenantContext, table_id: str) -> None:
    table = get_owned(db, HotelTable, ctx.tenant_id, table_id, "Table")
    active = db.query(func.count(Reservation.id)).filter(
        Reservation.tenant_id == ctx.tenant_id,
        Reservation.table_id == table.id,
        Reservation.status.in_(ACTIVE_RESERVATION_STATUSES)
    ).scalar()
    if active:
        raise DependencyExistsError("table", "active reservations")

    with atomic(db):
        # Finished reservations would block the FK; they go with the table
        db.query(Reservation).filter(
            Reservation.tenant_id == ctx.tenant_id,
            Reservation.table_id == table.id
        ).delete(synchronize_session=False)
        db.delete(table)
    logger.info(f"Table deleted: {table_id}", extra={"tenant_id": ctx.tenant_id})


# Reservations

def _ensure_slot_free(
    db: Session,
    tenant_id: str,
    table_id: str,
    at: datetime,
    exclude_id: str = None,
) -> None:
    query = db.query(Reservation.id).filter(
        Reservation.tenant_id == tenant_id,
        Reservation.table_id == table_id,
        Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
        Reservation.reservation_time >= at - BOOKING_WINDOW,
        Reservation.reservation_time <= at + BOOKING_WINDOW
    )
    if exclude_id:
        query = query.filter(Reservation.id != exclude_id)
    if query.first() is not None:
        raise ConflictError("Table already has a reservation around this time")


def create_reservation(db: Session, ctx: TenantContext, data: ReservationCreate) -> Reservation:
    # Table must belong to the caller's tenant
    table = get_owned(db, HotelTable, ctx.tenant_id, data.table_id, "Table")

    with atomic(db):
        _ensure_slot_free(db, ctx.tenant_id, table.id, data.reservation_time)
        reservation = Reservation(tenant_id=ctx.tenant_id, **data.model_dump())
        reservation.table = table
        db.add(reservation)

    logger.info(f"Reservation created: {reservation.id} on table {table.table_number}",
                extra={"tenant_id": ctx.tenant_id})
    return reservation


def list_reservations(
    db: Session,
    ctx: TenantContext,
    page: int,
    limit: int,
    status: Optional[ReservationStatus] = None,
    on_date=None,
    table_id: Optional[str] = None,
) -> Tuple[List[Reservation], Dict[str, Any]]:
    query = db.query(Reservation).options(joinedload(Reservation.table)).filter(
        Reservation.tenant_id == ctx.tenant_id
    )
    if status:
        query = query.filter(Reservation.status == status)
    if table_id:
        query = query.filter(Reservation.table_id == table_id)
    if on_date:
        start = datetime.combine(on_date, time.min)
        query = query.filter(
            Reservation.reservation_time >= start,
            Reservation.reservation_time < start + timedelta(days=1)
        )
    return paginate(query.order_by(Reservation.reservation_time.asc()), page, limit)


def get_reservation(db: Session, ctx: TenantContext, reservation_id: str) -> Reservation:
    return get_owned(db, Reservation, ctx.tenant_id, reservation_id, "Reservation")


def update_reservation(
    db: Session,
    ctx: TenantContext,
    reservation_id: str,
    data: ReservationUpdate,
) -> Reservation:
    reservation = get_owned(db, Reservation, ctx.tenant_id, reservation_id, "Reservation")
    changes = data.model_dump(exclude_unset=True)

    table_id = changes.get("table_id", reservation.table_id)
    if "table_id" in changes:
        get_owned(db, HotelTable, ctx.tenant_id, table_id, "Table")

    new_status = changes.get("status", reservation.status)
    moved = "table_id" in changes or "reservation_time" in changes
    revived = reservation.status not in ACTIVE_RESERVATION_STATUSES
    if (moved or revived) and new_status in ACTIVE_RESERVATION_STATUSES:
        _ensure_slot_free(
            db, ctx.tenant_id, table_id,
            changes.get("reservation_time", reservation.reservation_time),
            exclude_id=reservation.id
        )

    with atomic(db):
        apply_updates(reservation, changes)
    db.refresh(reservation)
    return reservation


def cancel_reservation(db: Session, ctx: TenantContext, reservation_id: str) -> Reservation:
    reservation = get_owned(db, Reservation, ctx.tenant_id, reservation_id, "Reservation")
    with atomic(db):
        reservation.status = ReservationStatus.CANCELLED
    return reservation


def hotel_stats(db: Session, ctx: TenantContext) -> Dict[str, Any]:
    tables = db.query(HotelTable).filter(HotelTable.tenant_id == ctx.tenant_id)
    total_tables = tables.count()
    available = tables.filter(HotelTable.status == TableStatus.AVAILABLE).count()
    occupied = tables.filter(HotelTable.status == TableStatus.OCCUPIED).count()

    reservations = db.query(Reservation).filter(Reservation.tenant_id == ctx.tenant_id)
    today = datetime.combine(datetime.utcnow().date(), time.min)
    today_count = reservations.filter(
        Reservation.reservation_time >= today,
        Reservation.reservation_time < today + timedelta(days=1)
    ).count()

    return {
        "total_tables": total_tables,
        "available_tables": available,
        "occupied_tables": occupied,
        "reserved_tables": total_tables - available - occupied,
        "total_reservations": reservations.count(),
        "today_reservations": today_count,
        "occupancy_rate": (occupied / total_tables) * 100 if total_tables else 0.0,
    }
