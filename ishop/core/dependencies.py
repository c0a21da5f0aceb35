"""
FastAPI dependencies. Injected into route handlers.
"""

import hmac

from fastapi import Header, HTTPException, status

from .auth import Shopper, get_current_shopper
from .config import get_settings


async def get_shopper(
    x_shopper_id: str = Header(default=""),
) -> Shopper:
    """Resolve the shopper (with stored profile) from the X-Shopper-Id header."""
    return await get_current_shopper(x_shopper_id)


async def require_admin(
    x_admin_passkey: str = Header(default=""),
) -> None:
    """Back-office routes. Checks the X-Admin-Passkey header."""
    expected = get_settings().admin_passkey
    if not x_admin_passkey or not hmac.compare_digest(x_admin_passkey, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin passkey required",
        )
