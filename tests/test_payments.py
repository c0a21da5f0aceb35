import hashlib
import hmac

import httpx
import pytest

from ishop.core.config import get_settings
from ishop.services import payments
from ishop.services.payments import (
    PaymentConfirmation,
    PaymentRequest,
    PaymentVerificationError,
    ProviderUnavailableError,
    RazorpayProvider,
)


@pytest.fixture
def razorpay(monkeypatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "razorpay_key_id", "rzp_test_key")
    monkeypatch.setattr(settings, "razorpay_key_secret", "shh")
    return RazorpayProvider()


def _serve(monkeypatch, handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    monkeypatch.setattr(payments, "_client", client)
    return client


def _request():
    return PaymentRequest(amount=99900, currency="INR", receipt="r1", prefill_name="Dagny")


async def test_create_intent(razorpay, monkeypatch):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"id": "order_abc"})

    _serve(monkeypatch, handler)

    intent = await razorpay.create_intent(_request())

    assert intent.order_id == "order_abc"
    assert intent.amount == 99900
    assert intent.prefill["name"] == "Dagny"
    assert seen[0].url.path.endswith("/orders")


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"status": "created"}),
        httpx.Response(200, text="<html>maintenance</html>"),
        httpx.Response(503, text="unavailable"),
    ],
)
async def test_unusable_gateway_response_is_unavailable(razorpay, monkeypatch, response):
    _serve(monkeypatch, lambda request: response)

    with pytest.raises(ProviderUnavailableError):
        await razorpay.create_intent(_request())


async def test_missing_keys_is_unavailable(monkeypatch):
    monkeypatch.setattr(get_settings(), "razorpay_key_id", "")

    with pytest.raises(ProviderUnavailableError):
        await RazorpayProvider().create_intent(_request())


def test_verify_signature(razorpay):
    signature = hmac.new(b"shh", b"order_abc|pay_1", hashlib.sha256).hexdigest()
    confirmation = PaymentConfirmation(
        razorpay_order_id="order_abc", razorpay_payment_id="pay_1", razorpay_signature=signature
    )

    assert razorpay.verify(confirmation) == "pay_1"

    with pytest.raises(PaymentVerificationError):
        razorpay.verify(confirmation.model_copy(update={"razorpay_signature": "forged"}))
