"""
Reference Data

Plans, modules and the optional bootstrap platform admin. Seeding is
idempotent: existing rows (matched by name/email) are left untouched.

Run directly with ``python -m bizsuite.seed``.
"""
from decimal import Decimal
from typing import Dict, List

from sqlalchemy.orm import Session

from bizsuite.config import get_settings
from bizsuite.database import SessionLocal, atomic, init_db
from bizsuite.models.admin import PlatformAdmin
from bizsuite.models.module import Module
from bizsuite.models.plan import Plan, BillingCycle
from bizsuite.core.security import get_password_hash
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

DEFAULT_PLANS: List[Dict] = [
    {
        "name": "trial",
        "display_name": "Free Trial (2 Months)",
        "price": Decimal("0.00"),
        "billing_cycle": BillingCycle.TRIAL,
        "features": {
            "maxProducts": 50,
            "maxUsers": 2,
            "maxTables": 5,
            "maxStorageMB": 50,
            "trialDurationDays": 60,
        },
    },
    {
        "name": "basic",
        "display_name": "Basic Plan",
        "price": Decimal("9.99"),
        "billing_cycle": BillingCycle.MONTHLY,
        "features": {"maxProducts": 100, "maxUsers": 2, "maxTables": 10, "maxStorageMB": 100},
    },
    {
        "name": "pro",
        "display_name": "Pro Plan",
        "price": Decimal("29.99"),
        "billing_cycle": BillingCycle.MONTHLY,
        "features": {"maxProducts": 1000, "maxUsers": 10, "maxTables": 50, "maxStorageMB": 1000},
    },
    {
        "name": "enterprise",
        "display_name": "Enterprise Plan",
        "price": Decimal("99.99"),
        "billing_cycle": BillingCycle.MONTHLY,
        "features": {"maxProducts": -1, "maxUsers": -1, "maxTables": -1, "maxStorageMB": -1},
    },
]

DEFAULT_MODULES: List[Dict] = [
    {
        "name": "inventory",
        "display_name": "Inventory Management",
        "description": "Manage products, stock levels, and track inventory movements",
    },
    {
        "name": "hotel",
        "display_name": "Hotel & Table Management",
        "description": "Manage table reservations and track occupancy",
    },
    {
        "name": "expenses",
        "display_name": "Expense Tracking",
        "description": "Track and categorize business expenses",
    },
    {
        "name": "landing",
        "display_name": "Landing Page Builder",
        "description": "Create and manage public-facing landing pages",
    },
    {
        "name": "ecommerce",
        "display_name": "Online Store",
        "description": "Sell products online with carts, coupons and orders",
    },
]


def seed_plans(db: Session) -> int:
    created = 0
    for data in DEFAULT_PLANS:
        if db.query(Plan).filter(Plan.name == data["name"]).first():
            continue
        db.add(Plan(**data))
        created += 1
    return created


def seed_modules(db: Session) -> int:
    created = 0
    for data in DEFAULT_MODULES:
        if db.query(Module).filter(Module.name == data["name"]).first():
            continue
        db.add(Module(**data))
        created += 1
    return created


def seed_bootstrap_admin(db: Session) -> bool:
    """Create the platform admin named in settings, if configured and missing."""
    email = settings.BOOTSTRAP_ADMIN_EMAIL
    password = settings.BOOTSTRAP_ADMIN_PASSWORD
    if not email or not password:
        return False
    if db.query(PlatformAdmin).filter(PlatformAdmin.email == email).first():
        return False
    db.add(PlatformAdmin(email=email, password_hash=get_password_hash(password)))
    return True


def seed_reference_data(db: Session) -> None:
    with atomic(db):
        plans = seed_plans(db)
        modules = seed_modules(db)
        admin = seed_bootstrap_admin(db)

    logger.info(
        f"Seed complete: {plans} plans, {modules} modules created"
        + (", bootstrap admin created" if admin else "")
    )


if __name__ == "__main__":
    init_db()
    session = SessionLocal()
    try:
        seed_reference_data(session)
    finally:
        session.close()
