# Storefront Models

from .product import Product, ProductCategory, ProductListResponse
from .cart import CartItem, CartState, AddToCartRequest, UpdateCartItemRequest, CartResponse
from .checkout import (
    Order,
    OrderLineSnapshot,
    OrderStatus,
    PaymentSession,
    PaymentStatus,
    PaymentProof,
    FlowState,
    CheckoutForm,
    CheckoutRequest,
    CheckoutResponse,
    CheckoutResult,
    ShippingAddress,
    VerifyPaymentRequest,
    GatewayCheckoutOptions,
    GatewayPrefill,
)
from .user import UserIdentity, UserRecord, SignUpRequest, SignInRequest, AuthResponse
from .gateway import (
    GatewaySession,
    GatewayEvent,
    PaymentCaptured,
    PaymentAuthorized,
    PaymentFailed,
    UnknownGatewayEvent,
    GatewayPayloadError,
    parse_gateway_event,
)

__all__ = [
    "Product",
    "ProductCategory",
    "ProductListResponse",
    "CartItem",
    "CartState",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "CartResponse",
    "Order",
    "OrderLineSnapshot",
    "OrderStatus",
    "PaymentSession",
    "PaymentStatus",
    "PaymentProof",
    "FlowState",
    "CheckoutForm",
    "CheckoutRequest",
    "CheckoutResponse",
    "CheckoutResult",
    "ShippingAddress",
    "VerifyPaymentRequest",
    "GatewayCheckoutOptions",
    "GatewayPrefill",
    "GatewaySession",
    "GatewayEvent",
    "PaymentCaptured",
    "PaymentAuthorized",
    "PaymentFailed",
    "UnknownGatewayEvent",
    "GatewayPayloadError",
    "parse_gateway_event",
    "UserIdentity",
    "UserRecord",
    "SignUpRequest",
    "SignInRequest",
    "AuthResponse",
]
