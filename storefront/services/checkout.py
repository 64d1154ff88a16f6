"""
Checkout Orchestrator

Drives a checkout attempt from the submitted shipping form to a verified
payment:

    idle -> form_validating -> order_creating -> payment_session_creating
         -> awaiting_gateway_redirect -> verifying_payment -> completed | failed

The gateway step leaves the site and comes back on a fresh request, so
nothing here is kept in memory between those two halves. The return handler
rebuilds the flow from the URL and the stored order/payment records.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse, parse_qs

from ..cart.store import CartStore, CartRegistry
from ..database.orders import OrderDatabase
from ..database.payments import PaymentDatabase
from ..errors import (
    PersistenceError,
    ValidationError,
    AuthenticationRequiredError,
    OrderCreationError,
    PaymentGatewayError,
    PaymentVerificationError,
)
from ..models.checkout import (
    CheckoutForm,
    CheckoutResponse,
    CheckoutResult,
    FlowState,
    GatewayCheckoutOptions,
    GatewayPrefill,
    Order,
    OrderLineSnapshot,
    OrderStatus,
    PaymentProof,
    PaymentSession,
    PaymentStatus,
    ShippingAddress,
)
from ..models.cart import CartState
from ..models.gateway import (
    GatewayEvent,
    GatewaySession,
    PaymentCaptured,
    PaymentAuthorized,
    PaymentFailed,
)
from ..models.user import UserIdentity
from .auth import AuthService
from .payment_gateway import (
    PaymentGatewayClient,
    ORDER_ID_PARAM,
    PAYMENT_ID_PARAM,
    SIGNATURE_PARAM,
    to_minor_units,
)
from .validation import validate_checkout_form

logger = logging.getLogger(__name__)


@dataclass
class CheckoutAttempt:
    """Tracks one pass through the checkout steps"""
    state: FlowState = FlowState.IDLE
    history: list[FlowState] = field(default_factory=list)

    def transition(self, state: FlowState) -> None:
        logger.debug(f"Checkout {self.state.value} -> {state.value}")
        self.history.append(self.state)
        self.state = state


@dataclass
class FlowResumption:
    """Where a returning request picks the flow back up"""
    state: FlowState
    proof: Optional[PaymentProof] = None


def extract_payment_proof(url: str) -> Optional[PaymentProof]:
    """Read the gateway's payment proof from a return URL, if all three parts are there"""
    query = parse_qs(urlparse(url).query)
    values = [
        query.get(name, [""])[0].strip()
        for name in (ORDER_ID_PARAM, PAYMENT_ID_PARAM, SIGNATURE_PARAM)
    ]
    if not all(values):
        return None

    gateway_order_id, gateway_payment_id, signature = values
    return PaymentProof(
        gateway_order_id=gateway_order_id,
        gateway_payment_id=gateway_payment_id,
        signature=signature,
    )


def resume(url: str, remote_payment: Optional[PaymentSession]) -> FlowResumption:
    """
    Decide how to continue a checkout after a full page load.

    Only the URL and the stored payment record count; any in-process state is
    ignored. A URL without the complete payment proof starts over at idle.
    """
    proof = extract_payment_proof(url)
    if proof is None:
        return FlowResumption(state=FlowState.IDLE)

    if (
        remote_payment is not None
        and remote_payment.gateway_order_id == proof.gateway_order_id
        and remote_payment.status == PaymentStatus.CAPTURED
        and remote_payment.gateway_payment_id == proof.gateway_payment_id
    ):
        return FlowResumption(state=FlowState.COMPLETED, proof=proof)

    return FlowResumption(state=FlowState.VERIFYING_PAYMENT, proof=proof)


class CheckoutOrchestrator:
    """
    Coordinates orders, payment sessions and payment verification.

    No step retries on its own. A failed attempt is retried by the shopper
    submitting the form again, which creates a fresh order and session.
    """

    def __init__(
        self,
        orders: OrderDatabase,
        payments: PaymentDatabase,
        carts: CartRegistry,
        gateway: PaymentGatewayClient,
        auth: AuthService,
        currency: str = "INR",
        phone_region: str = "IN",
        store_name: str = "Artisan Storefront",
        return_url: str = "http://localhost:8000/api/checkout/return",
    ):
        self.orders = orders
        self.payments = payments
        self.carts = carts
        self.gateway = gateway
        self.auth = auth
        self.currency = currency
        self.phone_region = phone_region
        self.store_name = store_name
        self.return_url = return_url

    # ==================== Checkout steps ====================

    def validate(self, form: CheckoutForm) -> CheckoutForm:
        """Step 1: check the contact and shipping fields"""
        return validate_checkout_form(form, phone_region=self.phone_region)

    def require_user(self, token: Optional[str]) -> UserIdentity:
        """Step 2: checkout only continues for a signed-in user"""
        user = self.auth.get_current_user(token)
        if not user:
            raise AuthenticationRequiredError(return_to="/checkout")
        return user

    def create_order(
        self,
        user: UserIdentity,
        cart: CartState,
        form: CheckoutForm,
        cart_id: Optional[str] = None,
    ) -> Order:
        """Step 3: record a pending order from a snapshot of the cart"""
        if cart.is_empty:
            raise OrderCreationError("Your cart is empty")

        snapshot = [
            OrderLineSnapshot(
                product_id=item.product_id,
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
            )
            for item in cart.items
        ]

        try:
            order = self.orders.create_order(
                user_id=user.id,
                items=snapshot,
                total=cart.total,
                shipping_address=ShippingAddress.from_form(form),
                cart_id=cart_id,
            )
        except PersistenceError as e:
            logger.error(f"Order creation failed for user {user.id}: {e}")
            raise OrderCreationError(f"Could not create order: {e}") from e

        logger.info(f"Order {order.id} created for user {user.id}: {order.total} {self.currency}")
        return order

    async def create_payment_session(self, order: Order) -> tuple[PaymentSession, GatewaySession]:
        """
        Step 4: open a gateway session for the order total.

        A failure here leaves the order pending so it can be paid later. A
        still-open earlier session for the same order is marked failed once
        its replacement exists.
        """
        previous = self.payments.list_order_payments(order.id)
        if any(p.status == PaymentStatus.CAPTURED for p in previous):
            raise PaymentGatewayError(f"Order {order.id} has already been paid")

        amount_minor = to_minor_units(order.total)
        session = await self.gateway.create_session(
            amount_minor_units=amount_minor,
            currency=self.currency,
            correlation_token=order.id,
        )

        if session.amount != amount_minor:
            raise PaymentGatewayError(
                f"Gateway amount {session.amount} does not match order amount {amount_minor}"
            )

        try:
            payment = self.payments.create_payment_record(
                order_id=order.id,
                gateway_order_id=session.session_id,
                amount=order.total,
                currency=session.currency,
            )
        except PersistenceError as e:
            logger.error(f"Could not record payment session for order {order.id}: {e}")
            raise PaymentGatewayError(f"Could not record payment session: {e}") from e

        for stale in previous:
            if stale.status == PaymentStatus.CREATED:
                self.payments.update_payment_record(
                    gateway_order_id=stale.gateway_order_id,
                    gateway_payment_id=None,
                    signature=None,
                    status=PaymentStatus.FAILED,
                )
                logger.info(f"Payment session {stale.gateway_order_id} superseded by {session.session_id}")

        return payment, session

    def gateway_checkout_options(
        self,
        order: Order,
        session: GatewaySession,
        prefill: GatewayPrefill,
    ) -> GatewayCheckoutOptions:
        """Step 5: what the browser needs to hand the shopper to the gateway"""
        return GatewayCheckoutOptions(
            key=session.public_key,
            amount=session.amount,
            currency=session.currency,
            order_id=session.session_id,
            name=self.store_name,
            description=f"Order {order.id}",
            prefill=prefill,
            notes={"order_id": order.id},
            callback_url=self.return_url,
        )

    async def start_checkout(
        self,
        token: Optional[str],
        form: CheckoutForm,
        cart: CartStore,
    ) -> CheckoutResponse:
        """Run steps 1 to 5 for a cart"""
        attempt = CheckoutAttempt()

        user = self.require_user(token)

        attempt.transition(FlowState.FORM_VALIDATING)
        try:
            form = self.validate(form)
        except ValidationError:
            attempt.transition(FlowState.IDLE)
            raise

        try:
            attempt.transition(FlowState.ORDER_CREATING)
            order = self.create_order(user, cart.state, form, cart_id=cart.cart_id)

            attempt.transition(FlowState.PAYMENT_SESSION_CREATING)
            payment, session = await self.create_payment_session(order)
        except (OrderCreationError, PaymentGatewayError):
            attempt.transition(FlowState.FAILED)
            raise

        attempt.transition(FlowState.AWAITING_GATEWAY_REDIRECT)
        options = self.gateway_checkout_options(
            order,
            session,
            GatewayPrefill(name=form.full_name, email=form.email, contact=form.phone),
        )
        return CheckoutResponse(
            state=attempt.state,
            order=order,
            payment=payment,
            checkout=options,
        )

    async def retry_payment(self, token: Optional[str], order_id: str) -> CheckoutResponse:
        """Open a fresh payment session for an existing unpaid order"""
        user = self.require_user(token)

        order = self.orders.get_order(order_id)
        if not order or order.user_id != user.id:
            raise PaymentGatewayError("Order not found or not authorized")
        if order.status != OrderStatus.PENDING:
            raise PaymentGatewayError(f"Order is {order.status.value} and cannot be paid")

        payment, session = await self.create_payment_session(order)
        options = self.gateway_checkout_options(
            order,
            session,
            GatewayPrefill(name=user.name, email=user.email, contact=""),
        )
        return CheckoutResponse(
            state=FlowState.AWAITING_GATEWAY_REDIRECT,
            order=order,
            payment=payment,
            checkout=options,
        )

    # ==================== Verification ====================

    def verify_payment(self, proof: PaymentProof) -> CheckoutResult:
        """
        Step 6: confirm a payment and settle the order.

        Safe to call again with the same proof: a payment that is already
        captured under this payment id returns completed without touching the
        order or the cart.

        Raises:
            PaymentVerificationError: bad signature, unknown session, or the
                order was already settled by a different payment
        """
        if not self.gateway.verify_signature(
            gateway_order_id=proof.gateway_order_id,
            gateway_payment_id=proof.gateway_payment_id,
            signature=proof.signature,
        ):
            raise PaymentVerificationError("Payment signature verification failed")

        payment = self.payments.get_by_gateway_order_id(proof.gateway_order_id)
        if not payment:
            raise PaymentVerificationError("Payment record not found")

        order = self.orders.get_order(payment.order_id)
        if not order:
            raise PaymentVerificationError("Order not found", order_id=payment.order_id)

        if payment.status == PaymentStatus.CAPTURED:
            if payment.gateway_payment_id != proof.gateway_payment_id:
                raise PaymentVerificationError(
                    "Payment session was settled by a different payment",
                    order_id=order.id,
                )
            logger.info(f"Payment {proof.gateway_payment_id} already verified for order {order.id}")
            return CheckoutResult(
                state=FlowState.COMPLETED,
                order_id=order.id,
                order_status=order.status,
                payment_status=payment.status,
                already_processed=True,
            )

        if any(
            p.status == PaymentStatus.CAPTURED
            for p in self.payments.list_order_payments(order.id)
        ):
            raise PaymentVerificationError(
                "Order has already been paid by another payment session",
                order_id=order.id,
            )

        payment = self._capture(
            payment,
            gateway_payment_id=proof.gateway_payment_id,
            signature=proof.signature,
            raw_payload={
                ORDER_ID_PARAM: proof.gateway_order_id,
                PAYMENT_ID_PARAM: proof.gateway_payment_id,
            },
        )
        order = self.orders.get_order(order.id)

        return CheckoutResult(
            state=FlowState.COMPLETED,
            order_id=order.id,
            order_status=order.status,
            payment_status=payment.status,
        )

    def resume_from_url(self, url: str) -> CheckoutResult:
        """
        Re-enter the flow on a page load, e.g. the gateway's return redirect.

        Verification failures are reported in the result rather than raised,
        since this is the end of the shopper's round trip.
        """
        proof = extract_payment_proof(url)
        remote = self.payments.get_by_gateway_order_id(proof.gateway_order_id) if proof else None
        resumption = resume(url, remote)

        if resumption.state == FlowState.IDLE:
            return CheckoutResult(state=FlowState.IDLE)

        try:
            return self.verify_payment(resumption.proof)
        except PaymentVerificationError as e:
            logger.warning(f"Payment verification failed on return: {e}")
            return CheckoutResult(
                state=FlowState.FAILED,
                order_id=e.order_id or (remote.order_id if remote else None),
                error_message=str(e),
            )

    def handle_gateway_event(self, event: GatewayEvent) -> Optional[PaymentSession]:
        """
        Apply a verified webhook event to the stored records.

        Returns the updated payment record, or None if the event was ignored.
        """
        if not isinstance(event, (PaymentCaptured, PaymentAuthorized, PaymentFailed)):
            logger.info(f"Ignoring gateway event {event.event}")
            return None

        payment = self.payments.get_by_gateway_order_id(event.gateway_order_id)
        if not payment:
            logger.warning(f"Webhook for unknown gateway order {event.gateway_order_id}")
            return None

        if payment.status == PaymentStatus.CAPTURED:
            logger.info(f"Gateway order {event.gateway_order_id} already captured, ignoring webhook")
            return payment

        if isinstance(event, PaymentCaptured):
            if any(
                p.status == PaymentStatus.CAPTURED
                for p in self.payments.list_order_payments(payment.order_id)
            ):
                logger.error(
                    f"Order {payment.order_id} captured twice; "
                    f"payment {event.gateway_payment_id} needs a refund"
                )
                return payment
            return self._capture(
                payment,
                gateway_payment_id=event.gateway_payment_id,
                signature=None,
                raw_payload=event.entity,
            )

        status = (
            PaymentStatus.AUTHORIZED
            if isinstance(event, PaymentAuthorized)
            else PaymentStatus.FAILED
        )
        logger.info(f"Gateway order {event.gateway_order_id} is now {status.value}")
        # The order stays pending either way so the shopper can pay again
        return self.payments.update_payment_record(
            gateway_order_id=event.gateway_order_id,
            gateway_payment_id=event.gateway_payment_id,
            signature=None,
            status=status,
            raw_payload=event.entity,
        )

    def _capture(
        self,
        payment: PaymentSession,
        gateway_payment_id: str,
        signature: Optional[str],
        raw_payload: Optional[dict],
    ) -> PaymentSession:
        """Mark a payment captured, move its order to processing and empty the cart"""
        payment = self.payments.update_payment_record(
            gateway_order_id=payment.gateway_order_id,
            gateway_payment_id=gateway_payment_id,
            signature=signature,
            status=PaymentStatus.CAPTURED,
            raw_payload=raw_payload,
        )

        order = self.orders.update_status(payment.order_id, OrderStatus.PROCESSING)
        self.orders.set_payment_ref(payment.order_id, payment.id)
        logger.info(f"Order {payment.order_id} paid with {gateway_payment_id}")

        if order and order.cart_id:
            cart = self.carts.get_cart(order.cart_id)
            if cart:
                cart.clear_cart()

        return payment

