"""
Database Models

Every tenant-owned model carries tenant_id; PlatformAdmin and
AdminAuditLog live outside the tenant space.
"""
from bizsuite.models.plan import Plan, BillingCycle
from bizsuite.models.tenant import Tenant, TenantStatus, BusinessType
from bizsuite.models.user import User, UserRole
from bizsuite.models.module import Module, TenantModule
from bizsuite.models.admin import PlatformAdmin, AdminAuditLog
from bizsuite.models.inventory import Product, StockMovement, MovementType
from bizsuite.models.hotel import HotelTable, Reservation, TableStatus, ReservationStatus
from bizsuite.models.expense import Expense
from bizsuite.models.ecommerce import (
    Category,
    EcommerceProduct,
    Cart,
    CartItem,
    CartStatus,
    Coupon,
    DiscountType,
    Order,
    OrderItem,
    OrderStatus,
)

__all__ = [
    "Plan", "BillingCycle",
    "Tenant", "TenantStatus", "BusinessType",
    "User", "UserRole",
    "Module", "TenantModule",
    "PlatformAdmin", "AdminAuditLog",
    "Product", "StockMovement", "MovementType",
    "HotelTable", "Reservation", "TableStatus", "ReservationStatus",
    "Expense",
    "Category", "EcommerceProduct", "Cart", "CartItem", "CartStatus",
    "Coupon", "DiscountType", "Order", "OrderItem", "OrderStatus",
]
