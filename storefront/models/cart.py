"""Cart models for the storefront"""

from pydantic import BaseModel, Field, computed_field, model_validator
from typing import Optional


class CartItem(BaseModel):
    """Line item in a shopping cart, keyed by product_id"""
    product_id: str
    name: str
    unit_price: float = Field(ge=0, allow_inf_nan=False)
    quantity: int = Field(gt=0)
    image_ref: Optional[str] = None
    artisan_ref: Optional[str] = None

    class Config:
        frozen = True

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


class CartState(BaseModel):
    """
    Shopping cart contents with derived totals.

    Only the items and the shipping charge are stored. Subtotal, total and
    item count are computed from the items on read, so they cannot disagree
    with them. Build states with ShippingPolicy.price(items), which picks the
    shipping charge.
    """
    items: tuple[CartItem, ...] = ()
    shipping: float = Field(default=0.0, ge=0, allow_inf_nan=False)

    class Config:
        frozen = True

    @model_validator(mode="after")
    def empty_cart_ships_free(self) -> "CartState":
        if not self.items and self.shipping:
            raise ValueError("An empty cart has no shipping charge")
        return self

    @computed_field
    @property
    def subtotal(self) -> float:
        return sum(item.line_total for item in self.items)

    @computed_field
    @property
    def total(self) -> float:
        return self.subtotal + self.shipping

    @computed_field
    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def find(self, product_id: str) -> Optional[CartItem]:
        """Get the line for a product, if present"""
        return next(
            (item for item in self.items if item.product_id == product_id),
            None,
        )

    @property
    def is_empty(self) -> bool:
        return not self.items


class AddToCartRequest(BaseModel):
    """Request to add a product to the cart"""
    product_id: str


class UpdateCartItemRequest(BaseModel):
    """Request to set a cart item quantity. Zero or less removes the item."""
    quantity: int


class CartResponse(BaseModel):
    """Cart API response"""
    cart_id: str
    cart: CartState
    message: Optional[str] = None
