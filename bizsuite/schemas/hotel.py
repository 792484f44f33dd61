"""
Hotel Schemas

Request/response models for tables and reservations.
"""
from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime, timezone

from bizsuite.models.hotel import ReservationStatus, TableStatus
from bizsuite.schemas.common import CamelModel


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TableCreate(CamelModel):
    table_number: str = Field(..., min_length=1, max_length=20)
    capacity: int = Field(4, ge=1, le=100)
    floor: Optional[str] = Field(None, max_length=50)
    section: Optional[str] = Field(None, max_length=50)


class TableUpdate(CamelModel):
    table_number: Optional[str] = Field(None, min_length=1, max_length=20)
    capacity: Optional[int] = Field(None, ge=1, le=100)
    status: Optional[TableStatus] = None
    floor: Optional[str] = Field(None, max_length=50)
    section: Optional[str] = Field(None, max_length=50)


class TableRef(CamelModel):
    id: str
    table_number: str
    capacity: int
    floor: Optional[str] = None
    section: Optional[str] = None


class ReservationCreate(CamelModel):
    table_id: str
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=50)
    customer_email: Optional[EmailStr] = None
    reservation_time: datetime
    party_size: int = Field(..., ge=1, le=100)
    special_requests: Optional[str] = None

    @field_validator("reservation_time")
    @classmethod
    def normalise_time(cls, value):
        return naive_utc(value)


class ReservationUpdate(CamelModel):
    table_id: Optional[str] = None
    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=50)
    customer_email: Optional[EmailStr] = None
    reservation_time: Optional[datetime] = None
    party_size: Optional[int] = Field(None, ge=1, le=100)
    status: Optional[ReservationStatus] = None
    special_requests: Optional[str] = None

    @field_validator("reservation_time")
    @classmethod
    def normalise_time(cls, value):
        return naive_utc(value)


class ReservationResponse(CamelModel):
    id: str
    table_id: str
    customer_name: str
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    reservation_time: datetime
    party_size: int
    status: ReservationStatus
    special_requests: Optional[str] = None
    created_at: datetime
    table: Optional[TableRef] = None


class TableResponse(CamelModel):
    id: str
    table_number: str
    capacity: int
    status: TableStatus
    floor: Optional[str] = None
    section: Optional[str] = None
    created_at: datetime
    next_reservation: Optional[ReservationResponse] = None


class HotelStats(CamelModel):
    total_tables: int
    available_tables: int
    occupied_tables: int
    reserved_tables: int
    total_reservations: int
    today_reservations: int
    occupancy_rate: float
