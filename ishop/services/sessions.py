"""
In-process registry of per-shopper carts and checkout sessions.

Neither is persisted: a cart lives as long as the process, a checkout lives
until it is closed or replaced by the next one.
"""

import logging
from typing import Optional

from .cart import Cart
from .catalog import get_catalog
from .checkout import CheckoutSession, CheckoutStateError, CheckoutStep
from .orders import get_ledger
from .payments import get_payment_provider

logger = logging.getLogger(__name__)

_carts: dict[str, Cart] = {}
_checkouts: dict[str, CheckoutSession] = {}


def get_cart(shopper_id: str) -> Cart:
    cart = _carts.get(shopper_id)
    if cart is None:
        cart = _carts[shopper_id] = Cart()
    return cart


def editable_cart(shopper_id: str) -> Cart:
    """The shopper's cart for modification. Locked while a payment is PROCESSING."""
    session = _checkouts.get(shopper_id)
    if session is not None and session.step is CheckoutStep.PROCESSING:
        raise CheckoutStateError("The cart cannot change while a payment is in progress")
    return get_cart(shopper_id)


async def open_checkout(
    shopper_id: str,
    customer_name: str = "",
    customer_email: str = "",
) -> CheckoutSession:
    """
    Validate the cart against live stock and start a fresh checkout.
    Refused while another checkout for this shopper is PROCESSING.
    """
    existing = _checkouts.get(shopper_id)
    if existing is not None and existing.step is CheckoutStep.PROCESSING:
        raise CheckoutStateError("A checkout is already in progress")

    cart = get_cart(shopper_id)
    current = {p.id: p for p in await get_catalog().list_products()}
    cart.validate(current)

    session = CheckoutSession(
        shopper_id=shopper_id,
        cart=cart,
        ledger=get_ledger(),
        provider=get_payment_provider(),
        customer_name=customer_name,
        customer_email=customer_email,
    )
    _checkouts[shopper_id] = session
    logger.info("Checkout %s opened for %s (total=%d)", session.id, shopper_id, session.total)
    return session


def get_checkout(shopper_id: str) -> Optional[CheckoutSession]:
    return _checkouts.get(shopper_id)


def close_checkout(shopper_id: str) -> bool:
    """Discard the shopper's checkout if it allows closing."""
    session = _checkouts.get(shopper_id)
    if session is None:
        return True
    if not session.close():
        return False
    _checkouts.pop(shopper_id, None)
    return True


def reset() -> None:
    _carts.clear()
    _checkouts.clear()
