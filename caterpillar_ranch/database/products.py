"""Catalog stand-in for the upstream fulfillment provider"""

from decimal import Decimal
from typing import Iterable, Optional

from ..core.errors import NotFoundError
from ..models.product import Product, ProductSize, Variant


def _variants(prefix: str, colors: Iterable[str], out_of_stock: Iterable[str] = ()) -> list[Variant]:
    sold_out = set(out_of_stock)
    variants = []
    for color in colors:
        for size in ProductSize:
            variant_id = f"{prefix}-{color.lower()}-{size.value.lower()}"
            variants.append(
                Variant(id=variant_id, size=size, color=color, in_stock=variant_id not in sold_out)
            )
    return variants


# Mock product catalog
PRODUCTS: dict[str, Product] = {
    "cr-001": Product(
        id="cr-001",
        name="The Culling Tee",
        slug="the-culling-tee",
        description="Only the invasive ones are taken. Heavyweight cotton, screen printed by moonlight.",
        price=Decimal("30.00"),
        variants=_variants("cr-001", ["Black", "Blood"]),
        tags=["horror", "caterpillar"],
    ),
    "cr-002": Product(
        id="cr-002",
        name="Midnight Garden Hoodie",
        slug="midnight-garden-hoodie",
        description="Something grows between the rows after dark.",
        price=Decimal("55.00"),
        variants=_variants("cr-002", ["Black"], out_of_stock=["cr-002-black-xxl"]),
        tags=["horror", "garden"],
    ),
    "cr-003": Product(
        id="cr-003",
        name="Chrysalis Pulse Tee",
        slug="chrysalis-pulse-tee",
        description="Listen closely. It is still beating.",
        price=Decimal("28.00"),
        variants=_variants("cr-003", ["Moss", "Black"]),
        tags=["horror", "chrysalis"],
    ),
    "cr-004": Product(
        id="cr-004",
        name="Larva Launch Long Sleeve",
        slug="larva-launch-long-sleeve",
        description="They were never meant to fly that far.",
        price=Decimal("34.50"),
        variants=_variants("cr-004", ["Bone"]),
        tags=["horror", "larva"],
    ),
}


class ProductDatabase:
    """In-memory, read-only catalog"""

    def __init__(self, products: Optional[Iterable[Product]] = None):
        if products is None:
            self.products = PRODUCTS.copy()
        else:
            self.products = {p.id: p for p in products}

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def require_product(self, product_id: str) -> Product:
        product = self.get_product(product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def get_all_products(self, in_stock_only: bool = False) -> list[Product]:
        """Get all products"""
        products = list(self.products.values())
        if in_stock_only:
            products = [p for p in products if p.in_stock]
        return products

    def price_of(self, product_id: str) -> Decimal:
        return self.require_product(product_id).price
