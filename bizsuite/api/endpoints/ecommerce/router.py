"""Storefront routes, mounted under /ecommerce."""
from fastapi import APIRouter

from bizsuite.api.endpoints.ecommerce import cart, categories, coupons, orders, products

router = APIRouter(prefix="/ecommerce")
router.include_router(categories.router)
router.include_router(products.router)
router.include_router(cart.router)
router.include_router(coupons.router)
router.include_router(orders.router)
