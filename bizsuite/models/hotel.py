"""
Hotel Models

Dining tables and the reservations booked against them.
"""
from sqlalchemy import (
    Column, String, Text, Integer, DateTime, ForeignKey, Index, UniqueConstraint, Enum as SQLEnum
)
from sqlalchemy.orm import relationship
from datetime import datetime
from bizsuite.database import Base, enum_values
import uuid
import enum


class TableStatus(str, enum.Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    MAINTENANCE = "maintenance"


class ReservationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


# Reservations in these states hold the table
ACTIVE_RESERVATION_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)


class HotelTable(Base):
    __tablename__ = "hotel_tables"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    table_number = Column(String(20), nullable=False)
    capacity = Column(Integer, default=4, nullable=False)
    status = Column(
        SQLEnum(TableStatus, name="table_status", values_callable=enum_values),
        default=TableStatus.AVAILABLE,
        nullable=False
    )
    floor = Column(String(50), nullable=True)
    section = Column(String(50), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    reservations = relationship("Reservation", back_populates="table")

    __table_args__ = (
        UniqueConstraint('tenant_id', 'table_number', name='uq_table_tenant_number'),
    )

    def __repr__(self):
        return f"<HotelTable {self.table_number} (tenant={self.tenant_id})>"


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    table_id = Column(
        String(36),
        ForeignKey("hotel_tables.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=True)
    customer_email = Column(String(255), nullable=True)
    reservation_time = Column(DateTime, nullable=False)
    party_size = Column(Integer, nullable=False)
    status = Column(
        SQLEnum(ReservationStatus, name="reservation_status", values_callable=enum_values),
        default=ReservationStatus.PENDING,
        nullable=False
    )
    special_requests = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    table = relationship("HotelTable", back_populates="reservations")

    __table_args__ = (
        Index('idx_reservation_tenant_time', 'tenant_id', 'reservation_time'),
        Index('idx_reservation_table_status', 'table_id', 'status'),
    )
