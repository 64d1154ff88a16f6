"""Shared pytest fixtures for storefront tests."""

import json
import itertools

import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.cart import CartRegistry
from storefront.core.session import SessionManager
from storefront.database import (
    MemoryStorage,
    OrderDatabase,
    PaymentDatabase,
    ProductDatabase,
    UserDatabase,
)
from storefront.dependencies import (
    get_auth_service,
    get_cart_registry,
    get_order_database,
    get_payment_database,
    get_orchestrator,
)
from storefront.main import app
from storefront.models.checkout import CheckoutForm
from storefront.security.signatures import compute_signature, payment_message
from storefront.services.auth import AuthService
from storefront.services.checkout import CheckoutOrchestrator
from storefront.services.payment_gateway import PaymentGatewayClient

KEY_ID = "rzp_test_key"
KEY_SECRET = "test_key_secret"
WEBHOOK_SECRET = "test_webhook_secret"
GATEWAY_URL = "http://gateway.test"
RETURN_URL = "http://testserver/api/checkout/return"


def sign_payment(gateway_order_id: str, gateway_payment_id: str) -> str:
    """Signature the gateway would put on a payment callback."""
    return compute_signature(KEY_SECRET, payment_message(gateway_order_id, gateway_payment_id))


def sign_webhook(body: bytes) -> str:
    return compute_signature(WEBHOOK_SECRET, body)


class FakeGateway:
    """
    Scripted gateway behind an httpx.MockTransport.

    Set status_code/error to make order creation fail, or amount_delta to
    return a mismatched amount.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.error = None
        self.amount_delta = 0
        self.raise_connect_error = False
        self._ids = itertools.count(1)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.raise_connect_error:
            raise httpx.ConnectError("connection refused", request=request)

        if self.status_code >= 400:
            return httpx.Response(
                self.status_code,
                json={"error": {"code": "BAD_REQUEST_ERROR", "description": self.error or "refused"}},
            )

        body = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "id": f"order_test{next(self._ids)}",
                "entity": "order",
                "amount": body["amount"] + self.amount_delta,
                "currency": body["currency"],
                "receipt": body["receipt"],
                "status": "created",
            },
        )

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """Keep key derivation cheap in tests."""
    monkeypatch.setattr("storefront.services.auth.PBKDF2_ITERATIONS", 1_000)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def registry(storage):
    return CartRegistry(storage=storage)


@pytest.fixture
def products():
    return ProductDatabase()


@pytest.fixture
def orders():
    return OrderDatabase()


@pytest.fixture
def payments():
    return PaymentDatabase()


@pytest.fixture
def users():
    return UserDatabase()


@pytest.fixture
def sessions():
    return SessionManager()


@pytest.fixture
def auth(users, sessions):
    return AuthService(users=users, sessions=sessions)


@pytest.fixture
def user(auth):
    """A registered shopper."""
    return auth.sign_up("asha@example.com", "correct-horse", "Asha Rao")


@pytest.fixture
def token(user, sessions):
    """Session token for the registered shopper."""
    return sessions.create_session(user.id).token


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def gateway(fake_gateway):
    http_client = httpx.AsyncClient(
        base_url=GATEWAY_URL,
        transport=httpx.MockTransport(fake_gateway.handler),
    )
    return PaymentGatewayClient(
        base_url=GATEWAY_URL,
        key_id=KEY_ID,
        key_secret=KEY_SECRET,
        webhook_secret=WEBHOOK_SECRET,
        http_client=http_client,
    )


@pytest.fixture
def orchestrator(orders, payments, registry, gateway, auth):
    return CheckoutOrchestrator(
        orders=orders,
        payments=payments,
        carts=registry,
        gateway=gateway,
        auth=auth,
        currency="INR",
        phone_region="IN",
        store_name="Test Storefront",
        return_url=RETURN_URL,
    )


@pytest.fixture
def form():
    """A checkout form that passes validation."""
    return CheckoutForm(
        email="asha@example.com",
        first_name="Asha",
        last_name="Rao",
        address="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        postal_code="560001",
        country="India",
        phone="9876543210",
    )


@pytest.fixture
def cart(registry, products):
    """A cart holding one rug (299.00, ships free)."""
    store = registry.create_cart()
    store.add_item(products.get_product("hand-woven-wool-rug-01"))
    return store


@pytest.fixture
def client(registry, auth, orders, payments, orchestrator):
    """API client wired to the test fixtures instead of the app singletons."""
    app.dependency_overrides[get_cart_registry] = lambda: registry
    app.dependency_overrides[get_auth_service] = lambda: auth
    app.dependency_overrides[get_order_database] = lambda: orders
    app.dependency_overrides[get_payment_database] = lambda: payments
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()
