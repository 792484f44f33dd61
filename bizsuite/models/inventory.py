"""
Inventory Models

Products with a running stock quantity and the movement log that
explains every change to it.
"""
from sqlalchemy import Column, String, Text, Integer, Numeric, DateTime, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from bizsuite.database import Base, enum_values
import uuid
import enum


class MovementType(str, enum.Enum):
    PURCHASE = "purchase"
    SALE = "sale"
    ADJUSTMENT = "adjustment"
    RETURN = "return"


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # CRITICAL: Tenant foreign key for isolation
    tenant_id = Column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = Column(String(255), nullable=False)
    sku = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=True)
    stock_quantity = Column(Integer, default=0, nullable=False)
    low_stock_threshold = Column(Integer, default=10, nullable=False)
    category = Column(String(100), nullable=True, index=True)
    image_url = Column(String(512), nullable=True)

    created_by = Column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    movements = relationship(
        "StockMovement",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="StockMovement.created_at.desc()"
    )

    __table_args__ = (
        Index('idx_product_tenant_created', 'tenant_id', 'created_at'),
        Index('idx_product_tenant_category', 'tenant_id', 'category'),
    )

    def __repr__(self):
        return f"<Product {self.name} (tenant={self.tenant_id})>"

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.low_stock_threshold


class StockMovement(Base):
    __tablename__ = "stock_movements"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    product_id = Column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Signed: positive adds stock, negative removes it
    quantity = Column(Integer, nullable=False)
    movement_type = Column(
        SQLEnum(MovementType, name="movement_type", values_callable=enum_values),
        nullable=False
    )
    notes = Column(Text, nullable=True)
    created_by = Column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    product = relationship("Product", back_populates="movements")

    __table_args__ = (
        Index('idx_movement_tenant_created', 'tenant_id', 'created_at'),
    )
