# Payment signature verification

from .signatures import PaymentSignatureVerifier, VerificationResult, compute_signature, payment_message

__all__ = ["PaymentSignatureVerifier", "VerificationResult", "compute_signature", "payment_message"]
