"""
Main API router. Mounts all sub-routers.
"""

from fastapi import APIRouter, Depends

from ..core.dependencies import require_admin

router = APIRouter()


# ── Health ───────────────────────────────────────────────────────────

@router.get("/health")
async def health():
    return {"status": "ok", "service": "ishop"}


# ── V1 routes ────────────────────────────────────────────────────────

from .products import products_router
from .cart import cart_router
from .checkout import checkout_router
from .commissions import commissions_router
from .orders import orders_router
from .profile import profile_router

router.include_router(products_router, prefix="/v1")
router.include_router(cart_router, prefix="/v1")
router.include_router(checkout_router, prefix="/v1")
router.include_router(commissions_router, prefix="/v1")
router.include_router(orders_router, prefix="/v1", dependencies=[Depends(require_admin)])
router.include_router(profile_router, prefix="/v1")
