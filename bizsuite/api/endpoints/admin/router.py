"""Platform admin routes, mounted under /admin."""
from fastapi import APIRouter

from bizsuite.api.endpoints.admin import analytics, auth, plans, system, tenants

router = APIRouter(prefix="/admin")
router.include_router(auth.router)
router.include_router(tenants.router)
router.include_router(plans.router)
router.include_router(system.router)
router.include_router(analytics.router)
