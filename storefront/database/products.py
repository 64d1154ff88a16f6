"""Artisan product catalog"""

from typing import Optional
from ..models.product import Product, ProductCategory

PRODUCTS: dict[str, Product] = {
    "hand-woven-wool-rug-01": Product(
        id="hand-woven-wool-rug-01",
        name="Hand-Woven Wool Rug",
        description="Hand-knotted wool rug coloured with natural dyes, woven on a cotton warp.",
        price=299.0,
        category=ProductCategory.TEXTILES,
        artisan="Amina Khalid",
        origin="Morocco",
        images=["/static/images/wool-rug.jpg"],
    ),
    "handcrafted-ceramic-vase-02": Product(
        id="handcrafted-ceramic-vase-02",
        name="Handcrafted Ceramic Vase",
        description="Wheel-thrown vase finished in a layered blue glaze. Each piece varies slightly.",
        price=129.0,
        category=ProductCategory.POTTERY,
        artisan="Ibrahim Anwar",
        origin="Egypt",
        images=["/static/images/ceramic-vase.jpg"],
    ),
    "silver-filigree-earrings-03": Product(
        id="silver-filigree-earrings-03",
        name="Silver Filigree Earrings",
        description="Sterling silver drop earrings worked in fine filigree.",
        price=89.0,
        category=ProductCategory.JEWELRY,
        artisan="Lakshmi Rao",
        origin="India",
        images=["/static/images/filigree-earrings.jpg"],
    ),
    "carved-teak-bowl-04": Product(
        id="carved-teak-bowl-04",
        name="Carved Teak Serving Bowl",
        description="Hand-carved reclaimed teak bowl, food safe oil finish.",
        price=64.5,
        category=ProductCategory.WOODWORK,
        artisan="Somchai Phan",
        origin="Thailand",
        images=["/static/images/teak-bowl.jpg"],
    ),
    "block-print-cushion-05": Product(
        id="block-print-cushion-05",
        name="Block-Printed Cushion Cover",
        description="Cotton cushion cover printed by hand with carved wooden blocks.",
        price=10.0,
        category=ProductCategory.HOME_DECOR,
        artisan="Meera Joshi",
        origin="India",
        images=["/static/images/block-print-cushion.jpg"],
    ),
    "brass-lantern-06": Product(
        id="brass-lantern-06",
        name="Pierced Brass Lantern",
        description="Hand-pierced brass lantern that casts patterned light.",
        price=175.0,
        category=ProductCategory.HOME_DECOR,
        artisan="Youssef Benali",
        origin="Morocco",
        images=["/static/images/brass-lantern.jpg"],
        in_stock=False,
    ),
}


class ProductDatabase:
    """In-memory product catalog"""

    def __init__(self, products: Optional[dict[str, Product]] = None):
        self.products = dict(products if products is not None else PRODUCTS)

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def list_products(
        self,
        category: Optional[ProductCategory] = None,
        in_stock_only: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        """
        List catalog products.

        Returns:
            Tuple of (page of products, total count)
        """
        results = list(self.products.values())

        if category:
            results = [p for p in results if p.category == category]

        if in_stock_only:
            results = [p for p in results if p.in_stock]

        total = len(results)
        return results[offset : offset + limit], total


# Singleton instance
product_db = ProductDatabase()
