"""Storefront exceptions"""

from typing import Optional


class PersistenceError(Exception):
    """A persistence service call failed"""
    pass


class CheckoutError(Exception):
    """Base exception for a failed checkout step"""
    pass


class ValidationError(CheckoutError):
    """Checkout form input the shopper needs to correct"""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("Please correct the errors in the form.")


class AuthenticationRequiredError(CheckoutError):
    """Checkout needs a signed-in user"""

    def __init__(self, return_to: str = "/checkout"):
        self.return_to = return_to
        super().__init__("Please sign in to continue to checkout.")

    @property
    def redirect_to(self) -> str:
        return f"/login?next={self.return_to}"


class OrderCreationError(CheckoutError):
    """The order could not be recorded"""
    pass


class PaymentGatewayError(CheckoutError):
    """The payment session could not be created"""
    pass


class PaymentVerificationError(CheckoutError):
    """A payment could not be confirmed"""

    def __init__(self, message: str, order_id: Optional[str] = None):
        self.order_id = order_id
        super().__init__(message)
