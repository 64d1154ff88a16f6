"""Cart API routes"""

from fastapi import APIRouter, HTTPException, Depends

from ..cart.store import CartRegistry, CartStore
from ..database.products import product_db
from ..dependencies import get_cart_registry
from ..models.cart import AddToCartRequest, UpdateCartItemRequest, CartResponse

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def get_cart_store(
    cart_id: str,
    carts: CartRegistry = Depends(get_cart_registry),
) -> CartStore:
    """Resolve the cart in the path, rehydrating it from storage if needed"""
    store = carts.get_cart(cart_id)
    if not store:
        raise HTTPException(status_code=404, detail="Cart not found")
    return store


@router.post("", response_model=CartResponse)
async def create_cart(carts: CartRegistry = Depends(get_cart_registry)):
    """Create a new shopping cart"""
    store = carts.create_cart()
    return CartResponse(cart_id=store.cart_id, cart=store.state, message="Cart created")


@router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(store: CartStore = Depends(get_cart_store)):
    """Get cart by ID"""
    return CartResponse(cart_id=store.cart_id, cart=store.state)


@router.post("/{cart_id}/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    store: CartStore = Depends(get_cart_store),
):
    """Add one unit of a product to the cart"""
    product = product_db.get_product(request.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    if not product.in_stock:
        raise HTTPException(status_code=400, detail=f"{product.name} is out of stock")

    cart = store.add_item(product)
    return CartResponse(
        cart_id=store.cart_id,
        cart=cart,
        message=f"Added {product.name} to cart",
    )


@router.put("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    request: UpdateCartItemRequest,
    store: CartStore = Depends(get_cart_store),
):
    """Set item quantity. Zero or less removes the item."""
    cart = store.update_quantity(product_id, request.quantity)
    return CartResponse(cart_id=store.cart_id, cart=cart, message="Cart updated")


@router.delete("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    product_id: str,
    store: CartStore = Depends(get_cart_store),
):
    """Remove an item from the cart"""
    cart = store.remove_item(product_id)
    return CartResponse(cart_id=store.cart_id, cart=cart, message="Item removed")


@router.delete("/{cart_id}", response_model=CartResponse)
async def clear_cart(store: CartStore = Depends(get_cart_store)):
    """Clear all items from cart"""
    cart = store.clear_cart()
    return CartResponse(cart_id=store.cart_id, cart=cart, message="Cart cleared")
