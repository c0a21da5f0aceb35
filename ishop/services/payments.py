"""
Payment gateway abstraction. Razorpay OR offline. Controlled by FF_USE_RAZORPAY flag.

The gateway checkout itself is a client-side popup. The server:
  1. creates a gateway order and hands the popup options to the client
  2. verifies the signed success callback the popup returns
Failure and dismissal callbacks carry no secret and need no verification.
"""

import hashlib
import hmac
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from pydantic import BaseModel

from ..core.config import get_settings
from ..core.flags import get_flags

logger = logging.getLogger(__name__)


class ProviderUnavailableError(Exception):
    """The gateway could not be reached or is not configured."""


class PaymentVerificationError(Exception):
    """A success callback failed signature verification."""


class PaymentRequest(BaseModel):
    amount: int                  # minor units (paise)
    currency: str
    receipt: str
    description: str = "Value for Value Exchange"
    prefill_name: str = ""
    prefill_email: str = ""


class PaymentIntent(BaseModel):
    """Everything the client needs to open the gateway popup."""

    provider: str
    key: str
    order_id: str
    amount: int
    currency: str
    name: str
    description: str
    prefill: dict = {}
    theme: dict = {"color": "#d97706"}


class PaymentConfirmation(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PaymentProvider(ABC):
    name: str = ""

    @abstractmethod
    async def create_intent(self, request: PaymentRequest) -> PaymentIntent:
        """Open a gateway order. Raises ProviderUnavailableError."""
        ...

    @abstractmethod
    def verify(self, confirmation: PaymentConfirmation) -> str:
        """Check a success callback. Returns the payment reference."""
        ...


# ── Reusable client (connection pool) ────────────────────────────────

_client: Optional[httpx.AsyncClient] = None


def _get_client() -> httpx.AsyncClient:
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(connect=5, read=15, write=10, pool=5),
        )
    return _client


async def close_client():
    """Close the shared HTTP client. Call on app shutdown."""
    global _client
    if _client and not _client.is_closed:
        await _client.aclose()
        _client = None


class RazorpayProvider(PaymentProvider):
    name = "razorpay"

    async def create_intent(self, request: PaymentRequest) -> PaymentIntent:
        settings = get_settings()
        if not settings.razorpay_key_id or not settings.razorpay_key_secret:
            raise ProviderUnavailableError("Razorpay keys are not configured")

        url = f"{settings.razorpay_base_url.rstrip('/')}/orders"
        payload = {
            "amount": request.amount,
            "currency": request.currency,
            "receipt": request.receipt,
        }
        try:
            resp = await _get_client().post(
                url,
                json=payload,
                auth=(settings.razorpay_key_id, settings.razorpay_key_secret),
            )
            resp.raise_for_status()
            order_id = resp.json()["id"]
        except httpx.HTTPStatusError as e:
            logger.error("Razorpay order error %d: %s", e.response.status_code, e.response.text[:500])
            raise ProviderUnavailableError(f"Razorpay returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(f"Razorpay unreachable: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Razorpay order response unreadable: %r", e)
            raise ProviderUnavailableError(f"Razorpay returned an unreadable order: {e}") from e

        logger.info("Razorpay order %s created (amount=%d %s)", order_id, request.amount, request.currency)
        return PaymentIntent(
            provider=self.name,
            key=settings.razorpay_key_id,
            order_id=order_id,
            amount=request.amount,
            currency=request.currency,
            name=settings.store_name,
            description=request.description,
            prefill={"name": request.prefill_name, "email": request.prefill_email},
        )

    def verify(self, confirmation: PaymentConfirmation) -> str:
        secret = get_settings().razorpay_key_secret.encode("utf-8")
        message = f"{confirmation.razorpay_order_id}|{confirmation.razorpay_payment_id}"
        expected = hmac.new(secret, message.encode("utf-8"), hashlib.sha256).hexdigest()
        if not hmac.compare_digest(expected, confirmation.razorpay_signature):
            raise PaymentVerificationError("Payment signature mismatch")
        return confirmation.razorpay_payment_id


class OfflineProvider(PaymentProvider):
    """Stands in when the gateway is switched off. Always unavailable."""

    name = "offline"

    async def create_intent(self, request: PaymentRequest) -> PaymentIntent:
        raise ProviderUnavailableError("Payment gateway disabled (FF_USE_RAZORPAY=false)")

    def verify(self, confirmation: PaymentConfirmation) -> str:
        raise PaymentVerificationError("Payment gateway disabled")


def get_payment_provider() -> PaymentProvider:
    """Return the active payment provider based on feature flags."""
    if get_flags().use_razorpay:
        return RazorpayProvider()
    return OfflineProvider()
