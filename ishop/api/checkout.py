"""
Checkout API (per shopper, X-Shopper-Id). Every endpoint returns the session snapshot.

POST   /v1/checkout                   — Open a checkout for the current cart
GET    /v1/checkout                   — Current session
POST   /v1/checkout/details           — Name + address (DETAILS → PAYMENT)
POST   /v1/checkout/payment-mode      — COD | UPI
POST   /v1/checkout/pay               — PAYMENT → PROCESSING (→ SUCCESS for COD)
POST   /v1/checkout/payment/success   — Gateway popup: signed success
POST   /v1/checkout/payment/failure   — Gateway popup: payment.failed
POST   /v1/checkout/payment/dismiss   — Gateway popup closed by the user
POST   /v1/checkout/finalize          — Retry recording a paid order
DELETE /v1/checkout                   — Close (ignored while PROCESSING / SUCCESS)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..core.auth import Shopper
from ..core.dependencies import get_shopper
from ..models import PaymentMode
from ..services import sessions
from ..services.cart import CartError
from ..services.checkout import CheckoutSession, CheckoutStateError
from ..services.payments import PaymentConfirmation, PaymentVerificationError

logger = logging.getLogger(__name__)

checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


class DetailsIn(BaseModel):
    name: str = ""
    address: str = ""


class PaymentModeIn(BaseModel):
    mode: PaymentMode


class FailureIn(BaseModel):
    reason: str = ""


def _session(shopper: Shopper) -> CheckoutSession:
    session = sessions.get_checkout(shopper.shopper_id)
    if session is None:
        raise HTTPException(status_code=404, detail="No active checkout")
    return session


def _conflict(e: CheckoutStateError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(e))


@checkout_router.post("")
async def open_checkout(shopper: Shopper = Depends(get_shopper)):
    try:
        session = await sessions.open_checkout(
            shopper.shopper_id,
            customer_name=shopper.name,
            customer_email=shopper.email,
        )
    except CartError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CheckoutStateError as e:
        raise _conflict(e)
    return session.snapshot()


@checkout_router.get("")
async def get_checkout(shopper: Shopper = Depends(get_shopper)):
    return _session(shopper).snapshot()


@checkout_router.post("/details")
async def submit_details(body: DetailsIn, shopper: Shopper = Depends(get_shopper)):
    session = _session(shopper)
    try:
        accepted = session.submit_details(body.name, body.address)
    except CheckoutStateError as e:
        raise _conflict(e)
    if not accepted:
        raise HTTPException(status_code=400, detail="Name and address are required.")
    return session.snapshot()


@checkout_router.post("/payment-mode")
async def select_payment_mode(body: PaymentModeIn, shopper: Shopper = Depends(get_shopper)):
    session = _session(shopper)
    try:
        session.select_payment_mode(body.mode)
    except CheckoutStateError as e:
        raise _conflict(e)
    return session.snapshot()


@checkout_router.post("/pay")
async def pay(shopper: Shopper = Depends(get_shopper)):
    session = _session(shopper)
    try:
        await session.pay()
    except CheckoutStateError as e:
        raise _conflict(e)
    except Exception:
        # pay() has put the session back in PAYMENT with an error message.
        logger.exception("Checkout %s: payment step failed", session.id)
    return session.snapshot()


@checkout_router.post("/payment/success")
async def payment_success(body: PaymentConfirmation, shopper: Shopper = Depends(get_shopper)):
    session = _session(shopper)
    try:
        await session.on_payment_success(body)
    except CheckoutStateError as e:
        raise _conflict(e)
    except PaymentVerificationError:
        raise HTTPException(status_code=400, detail=session.error)
    except Exception:
        # Paid but not recorded: the session holds the order (awaiting_finalize).
        logger.exception("Checkout %s: paid order not recorded", session.id)
    return session.snapshot()


@checkout_router.post("/finalize")
async def retry_finalize(shopper: Shopper = Depends(get_shopper)):
    session = _session(shopper)
    try:
        await session.retry_finalize()
    except CheckoutStateError as e:
        raise _conflict(e)
    except Exception:
        logger.exception("Checkout %s: paid order still not recorded", session.id)
    return session.snapshot()


@checkout_router.post("/payment/failure")
async def payment_failure(body: FailureIn, shopper: Shopper = Depends(get_shopper)):
    session = _session(shopper)
    try:
        session.on_payment_failure(body.reason)
    except CheckoutStateError as e:
        raise _conflict(e)
    return session.snapshot()


@checkout_router.post("/payment/dismiss")
async def payment_dismiss(shopper: Shopper = Depends(get_shopper)):
    session = _session(shopper)
    try:
        session.on_dismiss()
    except CheckoutStateError as e:
        raise _conflict(e)
    return session.snapshot()


@checkout_router.delete("")
async def close_checkout(shopper: Shopper = Depends(get_shopper)):
    session = sessions.get_checkout(shopper.shopper_id)
    closed = sessions.close_checkout(shopper.shopper_id)
    return {
        "closed": closed,
        "step": session.step.value if session else None,
    }
