"""Tests for the development mock gateway."""

from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from mock_gateway.config import GatewaySettings, get_gateway_settings
from mock_gateway.main import app
from storefront.security.signatures import PaymentSignatureVerifier

from .conftest import KEY_ID, KEY_SECRET


@pytest.fixture
def gateway_client():
    settings = GatewaySettings(gateway_key_id=KEY_ID, gateway_key_secret=KEY_SECRET)
    app.dependency_overrides[get_gateway_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_order(gateway_client, amount=29900):
    response = gateway_client.post(
        "/v1/orders",
        json={"amount": amount, "currency": "INR", "receipt": "store-order-1"},
        auth=(KEY_ID, KEY_SECRET),
    )
    assert response.status_code == 200
    return response.json()


def test_create_order(gateway_client):
    order = create_order(gateway_client)
    assert order["id"].startswith("order_")
    assert order["amount"] == 29900
    assert order["status"] == "created"
    assert gateway_client.get(f"/v1/orders/{order['id']}", auth=(KEY_ID, KEY_SECRET)).json() == order


def test_rejects_bad_credentials(gateway_client):
    response = gateway_client.post(
        "/v1/orders", json={"amount": 100, "currency": "INR"}, auth=(KEY_ID, "wrong")
    )
    assert response.status_code == 401


def test_pay_redirects_with_signed_proof(gateway_client):
    order = create_order(gateway_client)

    response = gateway_client.get(
        f"/pay/{order['id']}",
        params={"callback_url": "http://store.test/api/checkout/return"},
        follow_redirects=False,
    )
    assert response.status_code == 303

    location = urlparse(response.headers["location"])
    assert location.path == "/api/checkout/return"
    query = {key: values[0] for key, values in parse_qs(location.query).items()}
    assert query["razorpay_order_id"] == order["id"]

    verifier = PaymentSignatureVerifier(key_secret=KEY_SECRET)
    assert verifier.verify_payment(
        query["razorpay_order_id"], query["razorpay_payment_id"], query["razorpay_signature"]
    ).is_valid


def test_failed_payment_redirects_with_error(gateway_client):
    order = create_order(gateway_client)

    response = gateway_client.get(
        f"/pay/{order['id']}",
        params={"callback_url": "http://store.test/return", "outcome": "fail"},
        follow_redirects=False,
    )
    query = parse_qs(urlparse(response.headers["location"]).query)
    assert "razorpay_signature" not in query
    assert query["error[description]"] == ["Payment declined by issuer"]


def test_pay_unknown_order(gateway_client):
    response = gateway_client.get("/pay/order_missing", params={"callback_url": "http://store.test/"})
    assert response.status_code == 404
