"""
Checkout state machine.

  DETAILS ──submit──▶ PAYMENT ──pay──▶ PROCESSING ──▶ SUCCESS
                        ▲                  │
                        └── failure/dismiss┘

`pay()` freezes the cart lines; the amount charged and the order placed are
both computed from that snapshot, and the shopper's cart stays locked while
PROCESSING (see sessions.editable_cart).

COD settles locally. UPI opens a gateway order and waits in PROCESSING for
the popup's callback. If the gateway is unavailable the order is still
placed after a delay, flagged `payment_simulated` and published as a
separate event so it is never mistaken for a confirmed payment.

Once a gateway payment is verified the shopper is never asked to pay again:
if the order cannot be recorded the session keeps it and stays in
PROCESSING until `retry_finalize()` succeeds.

Close is refused while PROCESSING (money may be in flight) and in SUCCESS.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..core import redis as _redis
from ..core.config import get_settings
from ..models import CartLine, Order, OrderStatus, PaymentMode
from .cart import Cart
from .orders import OrderLedger
from .payments import (
    PaymentConfirmation,
    PaymentIntent,
    PaymentProvider,
    PaymentRequest,
    PaymentVerificationError,
    ProviderUnavailableError,
)

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Transaction cancelled by user."
GATEWAY_UNAVAILABLE_MESSAGE = "Payment Gateway Unavailable. Falling back to simulation."
GATEWAY_ERROR_MESSAGE = "Could not start the payment. Please try again."
GENERIC_FAILURE_MESSAGE = "Payment failed."
UNVERIFIED_MESSAGE = "Payment could not be verified."
FINALIZE_FAILED_MESSAGE = "Could not place the order. Please try again."
PAID_NOT_RECORDED_MESSAGE = (
    "Payment received, but the order could not be saved yet. Retrying will not charge you again."
)
EMPTY_CART_MESSAGE = "Your cart is empty."


class CheckoutStep(str, Enum):
    DETAILS = "DETAILS"
    PAYMENT = "PAYMENT"
    PROCESSING = "PROCESSING"
    SUCCESS = "SUCCESS"


class CheckoutStateError(Exception):
    """An action was attempted in a step that does not allow it."""


class CheckoutSession:
    def __init__(
        self,
        shopper_id: str,
        cart: Cart,
        ledger: OrderLedger,
        provider: PaymentProvider,
        customer_name: str = "",
        customer_email: str = "",
    ):
        self.id = uuid.uuid4().hex[:12]
        self.shopper_id = shopper_id
        self.cart = cart
        self.ledger = ledger
        self.provider = provider

        self.step = CheckoutStep.DETAILS
        self.customer_name = customer_name
        self.customer_address = ""
        self.customer_email = customer_email
        self.payment_mode = PaymentMode.UPI
        self.error: Optional[str] = None
        self.intent: Optional[PaymentIntent] = None
        self.order: Optional[Order] = None

        # Cart lines frozen by pay(), released when the session goes back to PAYMENT.
        self.lines: Optional[list[CartLine]] = None
        # Paid order that the ledger has not accepted yet.
        self._unrecorded: Optional[Order] = None

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def total(self) -> int:
        lines = self.lines if self.lines is not None else self.cart.lines
        return sum(line.subtotal for line in lines)

    @property
    def closable(self) -> bool:
        return self.step in (CheckoutStep.DETAILS, CheckoutStep.PAYMENT)

    @property
    def awaiting_gateway(self) -> bool:
        return self.step is CheckoutStep.PROCESSING and self.intent is not None

    @property
    def awaiting_finalize(self) -> bool:
        return self.step is CheckoutStep.PROCESSING and self._unrecorded is not None

    def _require(self, *steps: CheckoutStep) -> None:
        if self.step not in steps:
            allowed = ", ".join(s.value for s in steps)
            raise CheckoutStateError(f"Not allowed in {self.step.value} (expected {allowed})")

    def _move(self, step: CheckoutStep) -> None:
        logger.info("Checkout %s: %s → %s", self.id, self.step.value, step.value)
        self.step = step

    # ── DETAILS ──────────────────────────────────────────────────────

    def submit_details(self, name: str, address: str) -> bool:
        """Both fields are required. Returns False (staying in DETAILS) otherwise."""
        self._require(CheckoutStep.DETAILS)
        name, address = (name or "").strip(), (address or "").strip()
        if not name or not address:
            return False
        self.customer_name = name
        self.customer_address = address
        self._move(CheckoutStep.PAYMENT)
        return True

    # ── PAYMENT ──────────────────────────────────────────────────────

    def select_payment_mode(self, mode: PaymentMode) -> None:
        self._require(CheckoutStep.PAYMENT)
        self.payment_mode = PaymentMode(mode)

    async def pay(self) -> Optional[PaymentIntent]:
        """
        Freeze the cart and start the transaction. Returns the gateway intent
        for UPI, or None once a COD / simulated order has been placed.

        Any failure leaves the session back in PAYMENT with an error set.
        """
        self._require(CheckoutStep.PAYMENT)
        lines = self.cart.lines
        if not lines:
            raise CheckoutStateError(EMPTY_CART_MESSAGE)
        self.lines = lines
        self.error = None
        self._move(CheckoutStep.PROCESSING)
        settings = get_settings()

        if self.payment_mode is PaymentMode.COD:
            await asyncio.sleep(settings.cod_settle_delay)
            await self._finalize()
            return None

        request = PaymentRequest(
            amount=self.total * 100,
            currency=settings.currency,
            receipt=self.id,
            prefill_name=self.customer_name,
            prefill_email=self.customer_email,
        )
        try:
            self.intent = await self.provider.create_intent(request)
        except ProviderUnavailableError as e:
            logger.warning(
                "Checkout %s: gateway unavailable (%s), simulating payment success", self.id, e
            )
            self.error = GATEWAY_UNAVAILABLE_MESSAGE
            await asyncio.sleep(settings.payment_simulation_delay)
            await self._finalize(simulated=True)
            return None
        except Exception:
            logger.exception("Checkout %s: could not open a gateway order", self.id)
            self._back_to_payment(GATEWAY_ERROR_MESSAGE)
            raise
        return self.intent

    # ── PROCESSING callbacks ─────────────────────────────────────────

    async def on_payment_success(self, confirmation: PaymentConfirmation) -> Order:
        if not self.awaiting_gateway:
            raise CheckoutStateError("No gateway payment in progress")
        try:
            reference = self.provider.verify(confirmation)
        except PaymentVerificationError as e:
            logger.warning("Checkout %s: %s", self.id, e)
            self._back_to_payment(UNVERIFIED_MESSAGE)
            raise
        return await self._finalize(reference=reference)

    def on_payment_failure(self, reason: str) -> None:
        if not self.awaiting_gateway:
            raise CheckoutStateError("No gateway payment in progress")
        logger.info("Checkout %s: payment failed: %s", self.id, reason)
        self._back_to_payment((reason or "").strip() or GENERIC_FAILURE_MESSAGE)

    def on_dismiss(self) -> None:
        if not self.awaiting_gateway:
            raise CheckoutStateError("No gateway payment in progress")
        self._back_to_payment(CANCELLED_MESSAGE)

    async def retry_finalize(self) -> Order:
        """Record a paid order whose first finalize failed. Never charges again."""
        if not self.awaiting_finalize:
            raise CheckoutStateError("No paid order waiting to be recorded")
        return await self._finalize()

    def _back_to_payment(self, error: str) -> None:
        self.error = error
        self.intent = None
        self.lines = None
        self._move(CheckoutStep.PAYMENT)

    # ── Close ────────────────────────────────────────────────────────

    def close(self) -> bool:
        """Returns False (no-op) while PROCESSING or after SUCCESS."""
        if not self.closable:
            logger.info("Checkout %s: close ignored in %s", self.id, self.step.value)
            return False
        logger.info("Checkout %s closed in %s", self.id, self.step.value)
        return True

    # ── Finalize ─────────────────────────────────────────────────────

    def build_order(self, reference: Optional[str] = None, simulated: bool = False) -> Order:
        lines = self.lines if self.lines is not None else self.cart.lines
        return Order(
            id=uuid.uuid4().hex[:12],
            items=lines,
            total_amount=sum(line.subtotal for line in lines),
            payment_mode=self.payment_mode,
            date=datetime.now(timezone.utc).isoformat(),
            status=OrderStatus.PENDING,
            customer_name=self.customer_name,
            customer_address=self.customer_address,
            customer_email=self.customer_email,
            payment_reference=reference,
            payment_simulated=simulated,
        )

    async def _finalize(self, reference: Optional[str] = None, simulated: bool = False) -> Order:
        order = self._unrecorded or self.build_order(reference=reference, simulated=simulated)
        try:
            await self.ledger.record(order)
        except Exception:
            logger.exception("Checkout %s: failed to record order %s", self.id, order.id)
            if order.payment_reference:
                self._unrecorded = order
                self.intent = None
                self.error = PAID_NOT_RECORDED_MESSAGE
            else:
                self._back_to_payment(FINALIZE_FAILED_MESSAGE)
            raise

        self._unrecorded = None
        self.cart.clear()
        self.order = order
        self.intent = None
        self._move(CheckoutStep.SUCCESS)

        event = {"order_id": order.id, "total": order.total_amount, "mode": order.payment_mode.value}
        if order.payment_simulated:
            await _redis.notify_admin("checkout.payment_simulated", event)
        elif order.payment_reference:
            await _redis.notify_admin(
                "checkout.payment_confirmed", {**event, "reference": order.payment_reference}
            )
        await _redis.notify_shopper(self.shopper_id, "checkout.order_created", event)
        return order

    def snapshot(self) -> dict:
        return {
            "id": self.id,
            "step": self.step.value,
            "closable": self.closable,
            "awaiting_finalize": self.awaiting_finalize,
            "customer_name": self.customer_name,
            "customer_address": self.customer_address,
            "payment_mode": self.payment_mode.value,
            "total": self.total if self.order is None else self.order.total_amount,
            "error": self.error,
            "intent": self.intent.model_dump() if self.intent else None,
            "order_id": self.order.id if self.order else None,
        }
