"""
Payment Gateway Client

HTTP client for a Razorpay-compatible payment gateway. Creates gateway
orders (payment sessions) and verifies the signatures the gateway returns.
"""

import logging
from typing import Optional

import httpx

from ..errors import PaymentGatewayError
from ..models.gateway import GatewaySession, GatewayPayloadError
from ..security.signatures import PaymentSignatureVerifier

logger = logging.getLogger(__name__)

# Query parameters the gateway appends to callback_url after payment
ORDER_ID_PARAM = "razorpay_order_id"
PAYMENT_ID_PARAM = "razorpay_payment_id"
SIGNATURE_PARAM = "razorpay_signature"

WEBHOOK_SIGNATURE_HEADER = "X-Razorpay-Signature"


def to_minor_units(amount: float) -> int:
    """Convert an amount in rupees (or dollars) to paise (or cents)"""
    return int(round(amount * 100))


class PaymentGatewayClient:
    """
    Client for the payment gateway.

    The key secret is only used for HTTP basic auth and for signature checks;
    only the key id is ever sent to the browser.
    """

    def __init__(
        self,
        base_url: str,
        key_id: str,
        key_secret: str,
        webhook_secret: Optional[str] = None,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize gateway client.

        Args:
            base_url: Gateway API base URL
            key_id: Public key id (shown to the browser)
            key_secret: Secret key (server only)
            webhook_secret: Secret used to sign webhook bodies
            timeout: Request timeout in seconds
            http_client: Pre-built client, mainly for tests
        """
        self.base_url = base_url.rstrip("/")
        self.key_id = key_id
        self._http_client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            auth=(key_id, key_secret),
            timeout=timeout,
        )
        self._verifier = PaymentSignatureVerifier(
            key_secret=key_secret,
            webhook_secret=webhook_secret,
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def create_session(
        self,
        amount_minor_units: int,
        currency: str,
        correlation_token: str,
    ) -> GatewaySession:
        """
        Create a gateway order for the given amount.

        Args:
            amount_minor_units: Amount in the currency's smallest unit
            currency: ISO currency code
            correlation_token: Store order id, sent as receipt and in notes

        Raises:
            PaymentGatewayError: if the gateway is unreachable or refuses
        """
        body = {
            "amount": amount_minor_units,
            "currency": currency,
            "receipt": correlation_token,
            "notes": {"order_id": correlation_token},
        }

        logger.info(
            f"Creating gateway order for {amount_minor_units} {currency}, "
            f"receipt={correlation_token}"
        )

        try:
            response = await self._http_client.post("/v1/orders", json=body)
        except httpx.HTTPError as e:
            logger.error(f"Gateway request failed: {e}")
            raise PaymentGatewayError(f"Payment gateway unavailable: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            logger.error(f"Gateway refused order: {response.status_code} - {response.text}")
            description = None
            if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
                description = payload["error"].get("description")
            raise PaymentGatewayError(
                description or f"Payment gateway returned HTTP {response.status_code}"
            )

        try:
            session = GatewaySession.from_gateway(payload, self.key_id)
        except GatewayPayloadError as e:
            logger.error(f"Unexpected gateway response: {e}")
            raise PaymentGatewayError(str(e)) from e

        logger.info(f"Gateway order {session.session_id} created for {correlation_token}")
        return session

    def verify_signature(
        self,
        gateway_order_id: str,
        gateway_payment_id: str,
        signature: str,
    ) -> bool:
        """Check a payment callback signature"""
        result = self._verifier.verify_payment(
            gateway_order_id=gateway_order_id,
            gateway_payment_id=gateway_payment_id,
            signature=signature,
        )
        if not result.is_valid:
            logger.warning(
                f"Payment signature rejected for {gateway_order_id}: {result.error_message}"
            )
        return result.is_valid

    def verify_webhook_signature(self, body: bytes, signature: Optional[str]) -> bool:
        """Check a webhook signature"""
        result = self._verifier.verify_webhook(body, signature)
        if not result.is_valid:
            logger.warning(f"Webhook rejected: {result.error_message}")
        return result.is_valid
