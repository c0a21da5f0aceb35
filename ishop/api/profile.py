"""
Profile API — the signed-in shopper's stored identity.

GET    /v1/profile
PUT    /v1/profile
DELETE /v1/profile   — Sign out
"""

from fastapi import APIRouter, Depends, HTTPException

from ..core import auth
from ..core.auth import Shopper
from ..core.dependencies import get_shopper
from ..models import ShopperProfile

profile_router = APIRouter(prefix="/profile", tags=["profile"])


@profile_router.get("", response_model=ShopperProfile)
async def get_profile(shopper: Shopper = Depends(get_shopper)):
    profile = await auth.load_profile(shopper.shopper_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Not signed in")
    return profile


@profile_router.put("", response_model=ShopperProfile)
async def save_profile(body: ShopperProfile, shopper: Shopper = Depends(get_shopper)):
    if shopper.is_guest:
        raise HTTPException(status_code=400, detail="X-Shopper-Id header is required to sign in")
    await auth.save_profile(shopper.shopper_id, body)
    return body


@profile_router.delete("")
async def sign_out(shopper: Shopper = Depends(get_shopper)):
    await auth.clear_profile(shopper.shopper_id)
    return {"signed_out": True}
