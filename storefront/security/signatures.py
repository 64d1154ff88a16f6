"""
Payment Signature Verification

Checks the HMAC-SHA256 signatures the payment gateway attaches to payment
callbacks and webhooks. Runs server-side only: the secrets never leave the
backend.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    """Result of a signature check"""
    is_valid: bool
    error_message: Optional[str] = None


def compute_signature(secret: str, message: str | bytes) -> str:
    """Hex-encoded HMAC-SHA256 of message keyed by secret"""
    message_bytes = message.encode() if isinstance(message, str) else message
    h = hmac.HMAC(secret.encode(), hashes.SHA256())
    h.update(message_bytes)
    return h.finalize().hex()


def payment_message(gateway_order_id: str, gateway_payment_id: str) -> str:
    """The string the gateway signs for a completed payment"""
    return f"{gateway_order_id}|{gateway_payment_id}"


class PaymentSignatureVerifier:
    """
    Verifies gateway signatures.

    Usage:
        verifier = PaymentSignatureVerifier(key_secret="...", webhook_secret="...")

        result = verifier.verify_payment(
            gateway_order_id="order_123",
            gateway_payment_id="pay_456",
            signature=request_signature,
        )

        if result.is_valid:
            ...
    """

    def __init__(self, key_secret: str, webhook_secret: Optional[str] = None):
        """
        Args:
            key_secret: Gateway API key secret, signs payment callbacks
            webhook_secret: Secret configured for webhook delivery
        """
        if not key_secret:
            raise ValueError("Gateway key secret is required for signature verification")
        self._key_secret = key_secret
        self._webhook_secret = webhook_secret

    def verify_payment(
        self,
        gateway_order_id: str,
        gateway_payment_id: str,
        signature: str,
    ) -> VerificationResult:
        """Check the signature on a payment success callback"""
        if not gateway_order_id or not gateway_payment_id or not signature:
            return VerificationResult(
                is_valid=False,
                error_message="Missing payment verification parameters",
            )

        message = payment_message(gateway_order_id, gateway_payment_id)
        return self._verify(self._key_secret, message.encode(), signature)

    def verify_webhook(self, body: bytes, signature: Optional[str]) -> VerificationResult:
        """Check the signature header on a raw webhook body"""
        if not self._webhook_secret:
            return VerificationResult(
                is_valid=False,
                error_message="Webhook secret not configured",
            )

        if not signature:
            return VerificationResult(
                is_valid=False,
                error_message="Webhook signature missing",
            )

        return self._verify(self._webhook_secret, body, signature)

    def _verify(self, secret: str, message: bytes, signature: str) -> VerificationResult:
        try:
            expected = bytes.fromhex(signature)
        except ValueError:
            return VerificationResult(
                is_valid=False,
                error_message="Signature is not valid hex",
            )

        h = hmac.HMAC(secret.encode(), hashes.SHA256())
        h.update(message)
        try:
            h.verify(expected)
        except InvalidSignature:
            logger.warning("Rejected payment signature")
            return VerificationResult(
                is_valid=False,
                error_message="Invalid signature",
            )

        return VerificationResult(is_valid=True)
