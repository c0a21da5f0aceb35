import pytest

from ishop.core import store
from ishop.core.config import get_settings
from ishop.models import Product
from ishop.services import catalog, commissions, gemini, orders, sessions
from ishop.services.gemini import ErrorKind, GeminiCallError
from ishop.services.payments import (
    PaymentConfirmation,
    PaymentIntent,
    PaymentProvider,
    PaymentRequest,
    PaymentVerificationError,
    ProviderUnavailableError,
)


@pytest.fixture(autouse=True)
def fresh_state(monkeypatch):
    """Every test starts with an empty in-memory store and no sessions."""
    settings = get_settings()
    monkeypatch.setattr(settings, "cod_settle_delay", 0)
    monkeypatch.setattr(settings, "payment_simulation_delay", 0)
    monkeypatch.setattr(settings, "gemini_api_key", "")
    monkeypatch.setattr(commissions, "_active_requests", commissions.ActiveRequests())
    monkeypatch.setattr(store, "_store", store.MemoryStore())
    catalog.reset_catalog()
    orders.reset_ledger()
    sessions.reset()
    yield
    catalog.reset_catalog()
    orders.reset_ledger()
    sessions.reset()


class FakeGemini:
    """
    Stands in for the remote Gemini calls.

    image_outcomes maps a model name to either an image string or an
    ErrorKind to fail with. Every call is recorded.
    """

    def __init__(self):
        self.text_calls: list[tuple[str, str]] = []
        self.image_calls: list[tuple[str, str]] = []
        self.structured_calls: list[str] = []
        self.text_reply: object = "A refined prompt."
        self.structured_reply: object = None
        self.image_outcomes: dict[str, object] = {}

    async def generate_text(self, prompt, system=None):
        self.text_calls.append((prompt, system))
        if isinstance(self.text_reply, Exception):
            raise self.text_reply
        return self.text_reply

    async def generate_structured(self, prompt, schema):
        self.structured_calls.append(prompt)
        if isinstance(self.structured_reply, Exception):
            raise self.structured_reply
        return self.structured_reply

    async def generate_image(self, model, prompt):
        self.image_calls.append((model, prompt))
        outcome = self.image_outcomes.get(model, ErrorKind.OTHER)
        if isinstance(outcome, ErrorKind):
            raise GeminiCallError(outcome, f"{model} failed")
        return outcome

    def calls_to(self, model):
        return [c for c in self.image_calls if c[0] == model]


@pytest.fixture
def fake_gemini(monkeypatch):
    fake = FakeGemini()
    monkeypatch.setattr(gemini, "generate_text", fake.generate_text)
    monkeypatch.setattr(gemini, "generate_structured", fake.generate_structured)
    monkeypatch.setattr(gemini, "generate_image", fake.generate_image)
    return fake


@pytest.fixture
def models():
    settings = get_settings()
    return settings.primary_image_model, settings.secondary_image_model


class FakeProvider(PaymentProvider):
    name = "fake"

    def __init__(self, available=True, valid_signature="good-signature"):
        self.available = available
        self.valid_signature = valid_signature
        self.requests: list[PaymentRequest] = []

    async def create_intent(self, request):
        self.requests.append(request)
        if not self.available:
            raise ProviderUnavailableError("gateway script not loaded")
        return PaymentIntent(
            provider=self.name,
            key="rzp_test_key",
            order_id="order_123",
            amount=request.amount,
            currency=request.currency,
            name="theIshop",
            description=request.description,
        )

    def verify(self, confirmation: PaymentConfirmation) -> str:
        if confirmation.razorpay_signature != self.valid_signature:
            raise PaymentVerificationError("Payment signature mismatch")
        return confirmation.razorpay_payment_id


@pytest.fixture
def provider(monkeypatch):
    fake = FakeProvider()
    monkeypatch.setattr(sessions, "get_payment_provider", lambda: fake)
    return fake


@pytest.fixture
async def seeded_catalog():
    repo = catalog.get_catalog()
    await repo.initialize_if_absent()
    return repo


def product(id="1", price=999, stock=50, title="The Atlas"):
    return Product(id=id, title=title, quote="Who is John Galt?", price=price, stock=stock)
