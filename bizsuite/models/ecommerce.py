"""
E-commerce Models

Storefront catalog (categories, products), carts, coupons and orders.

Child rows (cart items, order items) duplicate tenant_id so every query
can filter by tenant without a join.
"""
from sqlalchemy import (
    Column, String, Text, Boolean, Integer, Numeric, DateTime, ForeignKey, Index,
    UniqueConstraint, Enum as SQLEnum
)
from sqlalchemy.orm import relationship
from datetime import datetime
from bizsuite.database import Base, enum_values
import uuid
import enum


class CartStatus(str, enum.Enum):
    ACTIVE = "active"
    CONVERTED = "converted"
    ABANDONED = "abandoned"


class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


def _tenant_fk():
    return Column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )


class Category(Base):
    __tablename__ = "ecommerce_categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = _tenant_fk()
    parent_id = Column(
        String(36),
        ForeignKey("ecommerce_categories.id", ondelete="RESTRICT"),
        nullable=True,
        index=True
    )

    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(512), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    parent = relationship("Category", remote_side=[id], back_populates="children")
    children = relationship(
        "Category",
        back_populates="parent",
        order_by="Category.sort_order"
    )
    products = relationship("EcommerceProduct", back_populates="category")

    __table_args__ = (
        UniqueConstraint('tenant_id', 'slug', name='uq_category_tenant_slug'),
    )

    def __repr__(self):
        return f"<Category {self.slug} (tenant={self.tenant_id})>"


class EcommerceProduct(Base):
    __tablename__ = "ecommerce_products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = _tenant_fk()
    category_id = Column(
        String(36),
        ForeignKey("ecommerce_categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    short_description = Column(String(500), nullable=True)
    sku = Column(String(100), nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    compare_at_price = Column(Numeric(12, 2), nullable=True)
    cost_price = Column(Numeric(12, 2), nullable=True)
    stock_quantity = Column(Integer, default=0, nullable=False)
    low_stock_threshold = Column(Integer, default=5, nullable=False)
    weight = Column(Numeric(10, 3), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    meta_title = Column(String(255), nullable=True)
    meta_description = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    category = relationship("Category", back_populates="products")

    __table_args__ = (
        UniqueConstraint('tenant_id', 'slug', name='uq_ecommerce_product_tenant_slug'),
        Index('idx_ecommerce_product_tenant_active', 'tenant_id', 'is_active'),
    )

    def __repr__(self):
        return f"<EcommerceProduct {self.slug} (tenant={self.tenant_id})>"


class Cart(Base):
    __tablename__ = "ecommerce_carts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = _tenant_fk()
    customer_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    status = Column(
        SQLEnum(CartStatus, name="cart_status", values_callable=enum_values),
        default=CartStatus.ACTIVE,
        nullable=False
    )
    expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    items = relationship("CartItem", back_populates="cart", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_cart_tenant_customer_status', 'tenant_id', 'customer_id', 'status'),
    )


class CartItem(Base):
    __tablename__ = "ecommerce_cart_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = _tenant_fk()
    cart_id = Column(
        String(36),
        ForeignKey("ecommerce_carts.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    product_id = Column(
        String(36),
        ForeignKey("ecommerce_products.id", ondelete="CASCADE"),
        nullable=False
    )
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    cart = relationship("Cart", back_populates="items")
    product = relationship("EcommerceProduct")


class Coupon(Base):
    __tablename__ = "ecommerce_coupons"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = _tenant_fk()

    # Always stored upper case
    code = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    discount_type = Column(
        SQLEnum(DiscountType, name="discount_type", values_callable=enum_values),
        nullable=False
    )
    discount_value = Column(Numeric(12, 2), nullable=False)
    min_order_amount = Column(Numeric(12, 2), nullable=True)
    max_uses = Column(Integer, nullable=True)
    uses_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    starts_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    orders = relationship("Order", back_populates="coupon")

    __table_args__ = (
        UniqueConstraint('tenant_id', 'code', name='uq_coupon_tenant_code'),
    )

    def __repr__(self):
        return f"<Coupon {self.code} (tenant={self.tenant_id})>"


class Order(Base):
    __tablename__ = "ecommerce_orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = _tenant_fk()
    customer_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    order_number = Column(String(50), unique=True, nullable=False)
    status = Column(
        SQLEnum(OrderStatus, name="order_status", values_callable=enum_values),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )

    subtotal = Column(Numeric(12, 2), nullable=False)
    tax_amount = Column(Numeric(12, 2), default=0, nullable=False)
    shipping_amount = Column(Numeric(12, 2), default=0, nullable=False)
    discount_amount = Column(Numeric(12, 2), default=0, nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    coupon_id = Column(
        String(36),
        ForeignKey("ecommerce_coupons.id", ondelete="SET NULL"),
        nullable=True
    )

    shipping_name = Column(String(255), nullable=False)
    shipping_address_line1 = Column(String(255), nullable=False)
    shipping_address_line2 = Column(String(255), nullable=True)
    shipping_city = Column(String(100), nullable=False)
    shipping_state = Column(String(100), nullable=False)
    shipping_postal_code = Column(String(20), nullable=False)
    shipping_country = Column(String(100), nullable=False)
    shipping_phone = Column(String(50), nullable=True)

    billing_name = Column(String(255), nullable=True)
    billing_address_line1 = Column(String(255), nullable=True)
    billing_address_line2 = Column(String(255), nullable=True)
    billing_city = Column(String(100), nullable=True)
    billing_state = Column(String(100), nullable=True)
    billing_postal_code = Column(String(20), nullable=True)
    billing_country = Column(String(100), nullable=True)

    notes = Column(Text, nullable=True)
    shipped_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    coupon = relationship("Coupon", back_populates="orders")

    __table_args__ = (
        Index('idx_order_tenant_created', 'tenant_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Order {self.order_number} (tenant={self.tenant_id})>"


class OrderItem(Base):
    __tablename__ = "ecommerce_order_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = _tenant_fk()
    order_id = Column(
        String(36),
        ForeignKey("ecommerce_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # Kept nullable so order history survives product deletion
    product_id = Column(
        String(36),
        ForeignKey("ecommerce_products.id", ondelete="SET NULL"),
        nullable=True
    )
    product_name = Column(String(255), nullable=False)
    sku = Column(String(100), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")
