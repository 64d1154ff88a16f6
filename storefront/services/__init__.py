# Services

from .auth import AuthService, AuthError
from .payment_gateway import PaymentGatewayClient, to_minor_units
from .checkout import CheckoutOrchestrator, CheckoutAttempt, FlowResumption, resume, extract_payment_proof
from .validation import validate_checkout_form

__all__ = [
    "AuthService",
    "AuthError",
    "PaymentGatewayClient",
    "to_minor_units",
    "CheckoutOrchestrator",
    "CheckoutAttempt",
    "FlowResumption",
    "resume",
    "extract_payment_proof",
    "validate_checkout_form",
]
