"""Product models for the storefront catalog"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class ProductCategory(str, Enum):
    TEXTILES = "textiles"
    POTTERY = "pottery"
    JEWELRY = "jewelry"
    WOODWORK = "woodwork"
    HOME_DECOR = "home_decor"


class Product(BaseModel):
    """Product in the catalog"""
    id: str
    name: str
    description: str
    price: float = Field(gt=0)
    currency: str = "INR"
    category: ProductCategory
    artisan: str
    origin: Optional[str] = None
    images: list[str] = []
    in_stock: bool = True

    class Config:
        from_attributes = True

    @property
    def image_ref(self) -> Optional[str]:
        """Primary image shown for the product in the cart"""
        return self.images[0] if self.images else None


class ProductListResponse(BaseModel):
    """Response from product listing"""
    products: list[Product]
    total: int
    limit: int
    offset: int
