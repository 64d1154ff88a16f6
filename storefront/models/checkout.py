"""Checkout models for the storefront"""

from pydantic import BaseModel, Field
from typing import Optional, Any
from datetime import datetime
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    CREATED = "created"
    AUTHORIZED = "authorized"
    CAPTURED = "captured"
    REFUNDED = "refunded"
    FAILED = "failed"


class FlowState(str, Enum):
    """Where a checkout attempt currently stands"""
    IDLE = "idle"
    FORM_VALIDATING = "form_validating"
    ORDER_CREATING = "order_creating"
    PAYMENT_SESSION_CREATING = "payment_session_creating"
    AWAITING_GATEWAY_REDIRECT = "awaiting_gateway_redirect"
    VERIFYING_PAYMENT = "verifying_payment"
    COMPLETED = "completed"
    FAILED = "failed"


class CheckoutForm(BaseModel):
    """Contact and shipping details as submitted on the checkout page"""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = "India"
    phone: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ShippingAddress(BaseModel):
    """Shipping address for order"""
    name: str
    street: str
    city: str
    state: str
    zip: str
    country: str = "India"

    @classmethod
    def from_form(cls, form: CheckoutForm) -> "ShippingAddress":
        return cls(
            name=form.full_name,
            street=form.address.strip(),
            city=form.city.strip(),
            state=form.state.strip(),
            zip=form.postal_code.strip(),
            country=form.country.strip() or "India",
        )


class OrderLineSnapshot(BaseModel):
    """Copy of a cart line frozen at checkout time"""
    product_id: str
    name: str
    unit_price: float
    quantity: int = Field(gt=0)

    class Config:
        frozen = True


class Order(BaseModel):
    """Order record held by the persistence service"""
    id: str
    user_id: str
    items: list[OrderLineSnapshot]
    total: float
    status: OrderStatus = OrderStatus.PENDING
    shipping_address: ShippingAddress
    payment_ref: Optional[str] = None
    cart_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PaymentSession(BaseModel):
    """Payment record for one gateway session of an order"""
    id: str
    order_id: str
    gateway_order_id: str
    amount: float
    currency: str = "INR"
    status: PaymentStatus = PaymentStatus.CREATED
    gateway_payment_id: Optional[str] = None
    signature: Optional[str] = None
    raw_payload: Optional[dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime


class PaymentProof(BaseModel):
    """The identifiers the gateway hands back once the shopper has paid"""
    gateway_order_id: str = Field(alias="razorpay_order_id")
    gateway_payment_id: str = Field(alias="razorpay_payment_id")
    signature: str = Field(alias="razorpay_signature")

    class Config:
        populate_by_name = True
        frozen = True


class CheckoutRequest(BaseModel):
    """Request to start checkout for a cart"""
    cart_id: str
    form: CheckoutForm


class VerifyPaymentRequest(BaseModel):
    """Gateway success callback forwarded by the browser"""
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str

    def to_proof(self) -> PaymentProof:
        return PaymentProof(
            gateway_order_id=self.razorpay_order_id,
            gateway_payment_id=self.razorpay_payment_id,
            signature=self.razorpay_signature,
        )


class GatewayPrefill(BaseModel):
    """Contact details prefilled in the gateway checkout"""
    name: str
    email: str
    contact: str


class GatewayCheckoutOptions(BaseModel):
    """Everything the browser needs to open the gateway checkout"""
    key: str
    amount: int
    currency: str
    order_id: str
    name: str
    description: str
    prefill: GatewayPrefill
    notes: dict[str, str] = {}
    callback_url: str
    redirect: bool = True


class CheckoutResponse(BaseModel):
    """Response from starting checkout"""
    state: FlowState
    order: Order
    payment: PaymentSession
    checkout: GatewayCheckoutOptions


class CheckoutResult(BaseModel):
    """Terminal outcome of a payment verification"""
    state: FlowState
    order_id: Optional[str] = None
    order_status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    already_processed: bool = False
    error_message: Optional[str] = None
