"""Tests for the HTTP API."""

import json
from datetime import datetime, timedelta

import pytest

from storefront.main import sweep_expired_state
from storefront.models.checkout import OrderStatus, PaymentStatus

from .conftest import RETURN_URL, sign_payment, sign_webhook


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def cart_id(client):
    response = client.post("/api/cart")
    assert response.status_code == 200
    cart_id = response.json()["cart_id"]
    client.post(f"/api/cart/{cart_id}/items", json={"product_id": "hand-woven-wool-rug-01"})
    return cart_id


@pytest.fixture
def checkout_body(cart_id, form):
    return {"cart_id": cart_id, "form": form.model_dump()}


def start_checkout(client, token, checkout_body):
    response = client.post("/api/checkout", json=checkout_body, headers=auth_header(token))
    assert response.status_code == 200, response.text
    return response.json()


class TestProducts:
    def test_list(self, client):
        data = client.get("/api/products").json()
        assert data["total"] == 6
        assert len(data["products"]) == 6

    def test_filters(self, client):
        data = client.get("/api/products", params={"category": "home_decor", "in_stock_only": True}).json()
        assert [p["id"] for p in data["products"]] == ["block-print-cushion-05"]

    def test_pagination(self, client):
        data = client.get("/api/products", params={"limit": 2, "offset": 4}).json()
        assert data["total"] == 6
        assert len(data["products"]) == 2

    def test_categories(self, client):
        assert "pottery" in client.get("/api/products/categories").json()

    def test_get(self, client):
        assert client.get("/api/products/carved-teak-bowl-04").json()["price"] == 64.5
        assert client.get("/api/products/nope").status_code == 404


class TestCart:
    def test_add_and_totals(self, client, cart_id):
        response = client.post(f"/api/cart/{cart_id}/items", json={"product_id": "block-print-cushion-05"})
        cart = response.json()["cart"]
        assert cart["subtotal"] == 309.0
        assert cart["shipping"] == 0.0
        assert cart["total"] == 309.0
        assert cart["item_count"] == 2

    def test_add_same_product_twice(self, client, cart_id):
        cart = client.post(
            f"/api/cart/{cart_id}/items", json={"product_id": "hand-woven-wool-rug-01"}
        ).json()["cart"]
        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 2
        assert cart["total"] == 598.0

    def test_add_unknown_or_out_of_stock(self, client, cart_id):
        assert client.post(f"/api/cart/{cart_id}/items", json={"product_id": "nope"}).status_code == 404
        assert client.post(f"/api/cart/{cart_id}/items", json={"product_id": "brass-lantern-06"}).status_code == 400

    def test_update_quantity(self, client):
        cart_id = client.post("/api/cart").json()["cart_id"]
        client.post(f"/api/cart/{cart_id}/items", json={"product_id": "carved-teak-bowl-04"})

        cart = client.put(
            f"/api/cart/{cart_id}/items/carved-teak-bowl-04", json={"quantity": 2}
        ).json()["cart"]
        assert cart["subtotal"] == 129.0
        assert cart["shipping"] == 10.0
        assert cart["total"] == 139.0

    def test_update_to_zero_removes(self, client, cart_id):
        cart = client.put(
            f"/api/cart/{cart_id}/items/hand-woven-wool-rug-01", json={"quantity": 0}
        ).json()["cart"]
        assert cart["items"] == []
        assert cart["total"] == 0.0

    def test_remove_and_clear(self, client, cart_id):
        client.post(f"/api/cart/{cart_id}/items", json={"product_id": "block-print-cushion-05"})

        cart = client.delete(f"/api/cart/{cart_id}/items/hand-woven-wool-rug-01").json()["cart"]
        assert [item["product_id"] for item in cart["items"]] == ["block-print-cushion-05"]

        cart = client.delete(f"/api/cart/{cart_id}").json()["cart"]
        assert cart["items"] == []

    def test_unknown_cart(self, client):
        assert client.get("/api/cart/missing").status_code == 404


class TestAuth:
    def test_signup_signin_me_signout(self, client):
        response = client.post(
            "/api/auth/signup",
            json={"email": "meera@example.com", "password": "block-print", "name": "Meera"},
        )
        assert response.status_code == 201
        token = response.json()["token"]

        assert client.get("/api/auth/me", headers=auth_header(token)).json()["email"] == "meera@example.com"

        assert client.post(
            "/api/auth/signup",
            json={"email": "MEERA@example.com", "password": "block-print", "name": "Meera"},
        ).status_code == 400

        assert client.post(
            "/api/auth/signin", json={"email": "meera@example.com", "password": "wrong-password"}
        ).status_code == 401

        client.post("/api/auth/signout", headers=auth_header(token))
        assert client.get("/api/auth/me", headers=auth_header(token)).status_code == 401

    def test_me_requires_sign_in(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"]["redirect_to"] == "/login?next=/api/auth/me"

    def test_short_password(self, client):
        response = client.post(
            "/api/auth/signup", json={"email": "a@example.com", "password": "short", "name": "A"}
        )
        assert response.status_code == 422


class TestCheckout:
    def test_start_checkout(self, client, token, checkout_body):
        data = start_checkout(client, token, checkout_body)
        assert data["state"] == "awaiting_gateway_redirect"
        assert data["order"]["status"] == "pending"
        assert data["checkout"]["amount"] == 29900
        assert data["checkout"]["callback_url"] == RETURN_URL

    def test_requires_sign_in(self, client, checkout_body):
        response = client.post("/api/checkout", json=checkout_body)
        assert response.status_code == 401
        assert response.json()["detail"]["redirect_to"] == "/login?next=/checkout"

    def test_invalid_form(self, client, token, checkout_body):
        checkout_body["form"]["email"] = "not-an-email"
        response = client.post("/api/checkout", json=checkout_body, headers=auth_header(token))
        assert response.status_code == 422
        assert response.json()["detail"]["errors"] == {"email": "Please enter a valid email address"}

    def test_empty_cart(self, client, token, form):
        cart_id = client.post("/api/cart").json()["cart_id"]
        response = client.post(
            "/api/checkout",
            json={"cart_id": cart_id, "form": form.model_dump()},
            headers=auth_header(token),
        )
        assert response.status_code == 400

    def test_unknown_cart(self, client, token, form):
        response = client.post(
            "/api/checkout",
            json={"cart_id": "missing", "form": form.model_dump()},
            headers=auth_header(token),
        )
        assert response.status_code == 404

    def test_gateway_down(self, client, token, checkout_body, fake_gateway):
        fake_gateway.raise_connect_error = True
        response = client.post("/api/checkout", json=checkout_body, headers=auth_header(token))
        assert response.status_code == 502

    def test_orders_are_private(self, client, token, checkout_body, auth, sessions):
        order_id = start_checkout(client, token, checkout_body)["order"]["id"]

        assert [o["id"] for o in client.get("/api/checkout/orders", headers=auth_header(token)).json()] == [order_id]
        assert client.get(f"/api/checkout/orders/{order_id}", headers=auth_header(token)).status_code == 200

        other = auth.sign_up("ravi@example.com", "another-pass", "Ravi")
        other_token = sessions.create_session(other.id).token
        assert client.get(f"/api/checkout/orders/{order_id}", headers=auth_header(other_token)).status_code == 404
        assert client.get("/api/checkout/orders", headers=auth_header(other_token)).json() == []

    def test_order_payment(self, client, token, checkout_body):
        data = start_checkout(client, token, checkout_body)

        response = client.get(f"/api/checkout/orders/{data['order']['id']}/payment", headers=auth_header(token))
        assert response.status_code == 200
        assert response.json()["gateway_order_id"] == data["payment"]["gateway_order_id"]
        assert response.json()["status"] == "created"

        assert client.get(f"/api/checkout/orders/{data['order']['id']}/payment").status_code == 401

    def test_retry(self, client, token, checkout_body):
        first = start_checkout(client, token, checkout_body)

        response = client.post(
            f"/api/checkout/orders/{first['order']['id']}/retry", headers=auth_header(token)
        )
        assert response.status_code == 200
        assert response.json()["payment"]["gateway_order_id"] != first["payment"]["gateway_order_id"]

    def test_retry_unknown_or_paid_order(self, client, token, checkout_body, orders):
        assert client.post("/api/checkout/orders/missing/retry", headers=auth_header(token)).status_code == 404

        order_id = start_checkout(client, token, checkout_body)["order"]["id"]
        orders.update_status(order_id, OrderStatus.PROCESSING)
        response = client.post(f"/api/checkout/orders/{order_id}/retry", headers=auth_header(token))
        assert response.status_code == 409


class TestPaymentReturn:
    def test_gateway_redirect_completes_order(self, client, token, checkout_body, orders, cart_id, registry):
        data = start_checkout(client, token, checkout_body)
        gateway_order_id = data["payment"]["gateway_order_id"]

        params = {
            "razorpay_order_id": gateway_order_id,
            "razorpay_payment_id": "pay_1",
            "razorpay_signature": sign_payment(gateway_order_id, "pay_1"),
        }
        response = client.get("/api/checkout/return", params=params)
        assert response.status_code == 200
        assert "Payment Successful" in response.text

        assert orders.get_order(data["order"]["id"]).status == OrderStatus.PROCESSING
        assert registry.get_cart(cart_id).state.is_empty

        # Reloading the page is harmless
        assert client.get("/api/checkout/return", params=params).status_code == 200

    def test_tampered_redirect(self, client, token, checkout_body, orders):
        data = start_checkout(client, token, checkout_body)
        params = {
            "razorpay_order_id": data["payment"]["gateway_order_id"],
            "razorpay_payment_id": "pay_1",
            "razorpay_signature": "00" * 32,
        }
        response = client.get("/api/checkout/return", params=params)
        assert response.status_code == 400
        assert "Payment Failed" in response.text
        assert orders.get_order(data["order"]["id"]).status == OrderStatus.PENDING

    def test_declined_payment(self, client):
        response = client.get(
            "/api/checkout/return",
            params={"error[code]": "BAD_REQUEST_ERROR", "error[description]": "Payment declined <by> issuer"},
        )
        assert response.status_code == 400
        assert "Payment declined &lt;by&gt; issuer" in response.text

    def test_no_payment(self, client):
        response = client.get("/api/checkout/return")
        assert response.status_code == 200
        assert "No Payment Found" in response.text

    def test_verify_endpoint(self, client, token, checkout_body):
        gateway_order_id = start_checkout(client, token, checkout_body)["payment"]["gateway_order_id"]
        body = {
            "razorpay_order_id": gateway_order_id,
            "razorpay_payment_id": "pay_1",
            "razorpay_signature": sign_payment(gateway_order_id, "pay_1"),
        }

        first = client.post("/api/payments/verify", json=body).json()
        assert first["state"] == "completed"
        assert not first["already_processed"]

        second = client.post("/api/payments/verify", json=body).json()
        assert second["already_processed"]

        body["razorpay_signature"] = sign_payment(gateway_order_id, "pay_2")
        assert client.post("/api/payments/verify", json=body).status_code == 400


class TestWebhook:
    def post_event(self, client, event, signature=None):
        body = json.dumps(event).encode()
        return client.post(
            "/api/payments/webhook",
            content=body,
            headers={
                "Content-Type": "application/json",
                "X-Razorpay-Signature": signature or sign_webhook(body),
            },
        )

    def test_captured_webhook(self, client, token, checkout_body, orders, payments):
        data = start_checkout(client, token, checkout_body)
        gateway_order_id = data["payment"]["gateway_order_id"]
        event = {
            "event": "payment.captured",
            "payload": {"payment": {"entity": {"id": "pay_hook", "order_id": gateway_order_id}}},
        }

        response = self.post_event(client, event)
        assert response.status_code == 200
        assert response.json() == {"received": True}
        assert payments.get_by_gateway_order_id(gateway_order_id).status == PaymentStatus.CAPTURED
        assert orders.get_order(data["order"]["id"]).status == OrderStatus.PROCESSING

        # Redelivery
        assert self.post_event(client, event).status_code == 200

    def test_bad_signature(self, client):
        response = self.post_event(client, {"event": "payment.captured"}, signature="00" * 32)
        assert response.status_code == 400

    def test_malformed_payload(self, client):
        assert self.post_event(client, {"event": "payment.captured"}).status_code == 400

    def test_unknown_event(self, client):
        assert self.post_event(client, {"event": "order.paid", "payload": {}}).status_code == 200


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_sweep_expired_state(client, registry, sessions, token, cart_id):
    sessions.sessions[token].updated_at = datetime.utcnow() - timedelta(days=2)
    registry.carts[cart_id].last_used = datetime.utcnow() - timedelta(days=4)

    assert sweep_expired_state(registry, sessions) == (1, 1)
    assert client.get("/api/auth/me", headers=auth_header(token)).status_code == 401
    assert client.get(f"/api/cart/{cart_id}").status_code == 404
