"""
Shopper identity. Sign-in itself happens outside this service: the client
sends a stable shopper id and we attach whatever profile was stored for it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..models import ShopperProfile
from . import store as _store
from .store import get_store

logger = logging.getLogger(__name__)

GUEST_ID = "guest"


@dataclass
class Shopper:
    shopper_id: str
    name: str = ""
    email: str = ""
    avatar: str = ""

    @property
    def is_guest(self) -> bool:
        return self.shopper_id == GUEST_ID


def _profile_key(shopper_id: str) -> str:
    return _store.store_key(_store.USER, shopper_id)


async def load_profile(shopper_id: str) -> Optional[ShopperProfile]:
    raw = await get_store().get(_profile_key(shopper_id))
    return ShopperProfile.model_validate(raw) if raw else None


async def save_profile(shopper_id: str, profile: ShopperProfile) -> None:
    await get_store().set(_profile_key(shopper_id), profile.model_dump())
    logger.info("Profile saved for %s", shopper_id)


async def clear_profile(shopper_id: str) -> None:
    await get_store().delete(_profile_key(shopper_id))


async def get_current_shopper(shopper_id: str = "") -> Shopper:
    """
    Resolve the shopper from the X-Shopper-Id value.
    No id → shared guest identity.
    """
    shopper_id = shopper_id.strip() or GUEST_ID
    profile = await load_profile(shopper_id)
    if profile is None:
        return Shopper(shopper_id=shopper_id)
    return Shopper(
        shopper_id=shopper_id,
        name=profile.name,
        email=profile.email,
        avatar=profile.avatar,
    )
