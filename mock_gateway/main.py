"""
Mock Payment Gateway

A stand-in for a Razorpay-style hosted checkout, for local development.

Simulation:
    POST /v1/orders       - create a gateway order (HTTP basic auth with key id/secret)
    GET  /v1/orders/{id}  - fetch a gateway order
    GET  /pay/{id}        - "pay" for an order and redirect to callback_url with
                            a signed razorpay_order_id/razorpay_payment_id/razorpay_signature.
                            outcome=fail redirects back with an error instead.

If a webhook URL is configured, each payment also produces a signed
payment.captured or payment.failed event.

Port:
    Default: 8002 (HTTP)
"""

import json
import logging
import secrets
import time
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import FastAPI, HTTPException, Depends, Query
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel, Field

from storefront.security.signatures import compute_signature, payment_message
from storefront.services.payment_gateway import (
    ORDER_ID_PARAM,
    PAYMENT_ID_PARAM,
    SIGNATURE_PARAM,
    WEBHOOK_SIGNATURE_HEADER,
)

from .config import GatewaySettings, get_gateway_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Mock Payment Gateway")
basic_auth = HTTPBasic()

# gateway order id -> order entity
orders: dict[str, dict] = {}


class CreateOrderRequest(BaseModel):
    """Create-order body, amounts in minor units"""
    amount: int = Field(gt=0)
    currency: str = "INR"
    receipt: Optional[str] = None
    notes: dict[str, str] = {}


def _new_id(prefix: str) -> str:
    return f"{prefix}_{secrets.token_hex(7)}"


def _gateway_error(status_code: int, description: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": "BAD_REQUEST_ERROR", "description": description}},
    )


def check_credentials(
    credentials: HTTPBasicCredentials = Depends(basic_auth),
    settings: GatewaySettings = Depends(get_gateway_settings),
) -> str:
    key_ok = secrets.compare_digest(credentials.username, settings.gateway_key_id)
    secret_ok = secrets.compare_digest(credentials.password, settings.gateway_key_secret)
    if not (key_ok and secret_ok):
        raise HTTPException(status_code=401, detail="Authentication failed")
    return credentials.username


@app.post("/v1/orders")
def create_order(
    request: CreateOrderRequest,
    key_id: str = Depends(check_credentials),
):
    """Create a gateway order for the shopper to pay"""
    if len(request.currency) != 3:
        return _gateway_error(400, f"Currency {request.currency} is not supported")

    order = {
        "id": _new_id("order"),
        "entity": "order",
        "amount": request.amount,
        "amount_paid": 0,
        "amount_due": request.amount,
        "currency": request.currency.upper(),
        "receipt": request.receipt,
        "status": "created",
        "notes": request.notes,
        "created_at": int(time.time()),
    }
    orders[order["id"]] = order

    logger.info(f"[PG] Order {order['id']} created: {request.amount} {order['currency']} (receipt {request.receipt})")
    return order


@app.get("/v1/orders/{order_id}")
def get_order(order_id: str, key_id: str = Depends(check_credentials)):
    order = orders.get(order_id)
    if not order:
        return _gateway_error(404, "The id provided does not exist")
    return order


def _payment_event(event: str, order: dict, payment_id: str, error_description: Optional[str] = None) -> dict:
    entity = {
        "id": payment_id,
        "entity": "payment",
        "amount": order["amount"],
        "currency": order["currency"],
        "status": "captured" if event == "payment.captured" else "failed",
        "order_id": order["id"],
        "notes": order["notes"],
    }
    if error_description:
        entity["error_description"] = error_description
    return {
        "entity": "event",
        "event": event,
        "payload": {"payment": {"entity": entity}},
        "created_at": int(time.time()),
    }


async def send_webhook(settings: GatewaySettings, body: dict) -> None:
    """Post a signed event to the configured webhook URL"""
    if not settings.mock_gateway_webhook_url or not settings.gateway_webhook_secret:
        return

    raw = json.dumps(body).encode()
    headers = {
        "Content-Type": "application/json",
        WEBHOOK_SIGNATURE_HEADER: compute_signature(settings.gateway_webhook_secret, raw),
    }
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.post(settings.mock_gateway_webhook_url, content=raw, headers=headers)
        logger.info(f"[PG] Webhook {body['event']} delivered: HTTP {response.status_code}")
    except httpx.HTTPError as e:
        logger.warning(f"[PG] Webhook {body['event']} not delivered: {e}")


@app.get("/pay/{order_id}")
async def pay(
    order_id: str,
    callback_url: str = Query(..., description="Where to send the shopper afterwards"),
    outcome: str = Query("success", pattern="^(success|fail)$"),
    settings: GatewaySettings = Depends(get_gateway_settings),
):
    """Simulate the shopper completing (or abandoning) payment on the hosted page"""
    order = orders.get(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    payment_id = _new_id("pay")
    separator = "&" if "?" in callback_url else "?"

    if outcome == "fail":
        logger.warning(f"[PG] Payment {payment_id} for {order_id} failed")
        await send_webhook(
            settings,
            _payment_event("payment.failed", order, payment_id, "Payment declined by issuer"),
        )
        query = urlencode({
            "error[code]": "BAD_REQUEST_ERROR",
            "error[description]": "Payment declined by issuer",
            "error[metadata]": json.dumps({"order_id": order_id, "payment_id": payment_id}),
        })
        return RedirectResponse(url=f"{callback_url}{separator}{query}", status_code=303)

    order["status"] = "paid"
    order["amount_paid"] = order["amount"]
    order["amount_due"] = 0

    signature = compute_signature(settings.gateway_key_secret, payment_message(order_id, payment_id))
    logger.info(f"[PG] Payment {payment_id} captured for {order_id}")

    await send_webhook(settings, _payment_event("payment.captured", order, payment_id))

    query = urlencode({
        ORDER_ID_PARAM: order_id,
        PAYMENT_ID_PARAM: payment_id,
        SIGNATURE_PARAM: signature,
    })
    return RedirectResponse(url=f"{callback_url}{separator}{query}", status_code=303)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "mock-gateway"}


if __name__ == "__main__":
    import uvicorn

    settings = get_gateway_settings()
    uvicorn.run(
        "mock_gateway.main:app",
        host=settings.host,
        port=settings.mock_gateway_port,
        reload=True,
    )
