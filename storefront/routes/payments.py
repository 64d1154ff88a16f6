"""Payment verification and gateway webhook routes"""

import json
import logging

from fastapi import APIRouter, HTTPException, Depends, Request

from ..dependencies import get_orchestrator
from ..errors import PaymentVerificationError
from ..models.checkout import CheckoutResult, VerifyPaymentRequest
from ..models.gateway import GatewayPayloadError, parse_gateway_event
from ..services.checkout import CheckoutOrchestrator
from ..services.payment_gateway import WEBHOOK_SIGNATURE_HEADER

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@router.post("/verify", response_model=CheckoutResult)
async def verify_payment(
    request: VerifyPaymentRequest,
    orchestrator: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """Verify a payment handed back by the gateway checkout"""
    try:
        return orchestrator.verify_payment(request.to_proof())
    except PaymentVerificationError as e:
        logger.warning(f"Payment verification failed for {request.razorpay_order_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/webhook")
async def gateway_webhook(
    request: Request,
    orchestrator: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """
    Receive payment events from the gateway.

    The body is signed with the webhook secret; the signature is checked
    against the raw bytes before anything is parsed.
    """
    body = await request.body()
    signature = request.headers.get(WEBHOOK_SIGNATURE_HEADER)

    if not orchestrator.gateway.verify_webhook_signature(body, signature):
        logger.warning("Rejected webhook with invalid signature")
        raise HTTPException(status_code=400, detail="Invalid webhook signature")

    try:
        event = parse_gateway_event(json.loads(body))
    except (json.JSONDecodeError, GatewayPayloadError) as e:
        raise HTTPException(status_code=400, detail=f"Malformed webhook payload: {e}")

    orchestrator.handle_gateway_event(event)
    return {"received": True}
