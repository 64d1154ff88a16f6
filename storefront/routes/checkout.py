"""Checkout API routes"""

import html
import logging

from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.responses import HTMLResponse

from ..cart.store import CartRegistry
from ..database.orders import OrderDatabase
from ..database.payments import PaymentDatabase
from ..dependencies import get_cart_registry, get_order_database, get_payment_database, get_orchestrator
from ..errors import (
    ValidationError,
    AuthenticationRequiredError,
    OrderCreationError,
    PaymentGatewayError,
)
from ..models.checkout import CheckoutRequest, CheckoutResponse, CheckoutResult, FlowState, Order, OrderStatus, PaymentSession
from ..models.user import UserIdentity
from ..security.session_auth import require_user, get_session_token
from ..services.checkout import CheckoutOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


def _checkout_http_error(e: Exception) -> HTTPException:
    """Translate a checkout step failure into the response the browser expects"""
    if isinstance(e, ValidationError):
        return HTTPException(status_code=422, detail={"message": str(e), "errors": e.errors})
    if isinstance(e, AuthenticationRequiredError):
        return HTTPException(status_code=401, detail={"message": str(e), "redirect_to": e.redirect_to})
    if isinstance(e, OrderCreationError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=502, detail=str(e))


@router.post("", response_model=CheckoutResponse)
async def checkout(
    request: CheckoutRequest,
    http_request: Request,
    carts: CartRegistry = Depends(get_cart_registry),
    orchestrator: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """
    Start checkout for a cart.

    Validates the shipping form, records a pending order and opens a gateway
    payment session. The response carries the options the browser passes to
    the gateway checkout; the gateway sends the shopper back to /return.
    """
    cart = carts.get_cart(request.cart_id)
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")

    try:
        return await orchestrator.start_checkout(
            token=get_session_token(http_request),
            form=request.form,
            cart=cart,
        )
    except (ValidationError, AuthenticationRequiredError, OrderCreationError, PaymentGatewayError) as e:
        logger.info(f"Checkout for cart {request.cart_id} stopped: {e}")
        raise _checkout_http_error(e)


@router.post("/orders/{order_id}/retry", response_model=CheckoutResponse)
async def retry_payment(
    order_id: str,
    http_request: Request,
    user: UserIdentity = Depends(require_user),
    orders: OrderDatabase = Depends(get_order_database),
    orchestrator: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """Open a new payment session for a pending order"""
    order = orders.get_order(order_id)
    if not order or order.user_id != user.id:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.status != OrderStatus.PENDING:
        raise HTTPException(status_code=409, detail=f"Order is {order.status.value} and cannot be paid")

    try:
        return await orchestrator.retry_payment(get_session_token(http_request), order_id)
    except (AuthenticationRequiredError, PaymentGatewayError) as e:
        raise _checkout_http_error(e)


@router.get("/orders", response_model=list[Order])
async def list_orders(
    user: UserIdentity = Depends(require_user),
    orders: OrderDatabase = Depends(get_order_database),
):
    """List the signed-in user's orders, newest first"""
    return orders.list_user_orders(user.id)


@router.get("/orders/{order_id}", response_model=Order)
async def get_order(
    order_id: str,
    user: UserIdentity = Depends(require_user),
    orders: OrderDatabase = Depends(get_order_database),
):
    """Get one of the signed-in user's orders"""
    order = orders.get_order(order_id)
    if not order or order.user_id != user.id:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get("/orders/{order_id}/payment", response_model=PaymentSession)
async def get_order_payment(
    order_id: str,
    user: UserIdentity = Depends(require_user),
    orders: OrderDatabase = Depends(get_order_database),
    payments: PaymentDatabase = Depends(get_payment_database),
):
    """Get the active payment record for one of the signed-in user's orders"""
    order = orders.get_order(order_id)
    if not order or order.user_id != user.id:
        raise HTTPException(status_code=404, detail="Order not found")

    payment = payments.get_payment_by_order_id(order_id)
    if not payment:
        raise HTTPException(status_code=404, detail="No payment for this order")
    return payment


def _result_page(result: CheckoutResult) -> str:
    if result.state == FlowState.COMPLETED:
        title = "Payment Successful"
        icon = '<div class="text-green-500 text-6xl mb-4">✓</div>'
        body = f"Thank you! Order {html.escape(result.order_id or '')} is being processed."
    elif result.state == FlowState.IDLE:
        title = "No Payment Found"
        icon = '<div class="text-gray-400 text-6xl mb-4">?</div>'
        body = "There is no payment to confirm. Return to your cart to check out."
    else:
        title = "Payment Failed"
        icon = '<div class="text-red-500 text-6xl mb-4">✗</div>'
        body = html.escape(result.error_message or "We could not confirm your payment.")

    return f"""
    <html>
    <head>
        <title>{title}</title>
        <script src="https://cdn.tailwindcss.com"></script>
    </head>
    <body class="bg-gray-100 min-h-screen flex items-center justify-center">
        <div class="bg-white p-8 rounded-lg shadow-md max-w-md text-center">
            {icon}
            <h1 class="text-2xl font-bold text-gray-900 mb-2">{title}</h1>
            <p class="text-gray-600 mb-4">{body}</p>
            <a href="/" class="text-sm text-blue-600">Continue shopping</a>
        </div>
    </body>
    </html>
    """


@router.get("/return", response_class=HTMLResponse)
async def checkout_return(
    request: Request,
    orchestrator: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """
    Landing page for the gateway redirect.

    The gateway appends razorpay_order_id, razorpay_payment_id and
    razorpay_signature to the callback URL. Reloading this page is safe.
    """
    result = orchestrator.resume_from_url(str(request.url))

    # A declined payment comes back with error[...] params instead of a proof
    gateway_error = request.query_params.get("error[description]")
    if result.state == FlowState.IDLE and gateway_error:
        logger.info(f"Gateway returned without payment: {gateway_error}")
        result = CheckoutResult(state=FlowState.FAILED, error_message=gateway_error)

    status_code = 400 if result.state == FlowState.FAILED else 200
    return HTMLResponse(content=_result_page(result), status_code=status_code)
