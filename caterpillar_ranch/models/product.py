"""Product models supplied by the catalog collaborator"""

from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class ProductSize(str, Enum):
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"


class Variant(BaseModel):
    """Purchasable size/color variant of a product"""
    id: str
    size: ProductSize
    color: str
    in_stock: bool = True


class Product(BaseModel):
    """Product in the catalog"""
    id: str
    name: str
    slug: str
    description: str = ""
    price: Decimal = Field(gt=0, decimal_places=2)
    variants: list[Variant] = []
    tags: list[str] = []
    image_url: Optional[str] = None

    def get_variant(self, variant_id: str) -> Optional[Variant]:
        return next((v for v in self.variants if v.id == variant_id), None)

    @property
    def in_stock(self) -> bool:
        return any(v.in_stock for v in self.variants)


class ProductListResponse(BaseModel):
    """Response from product listing"""
    products: list[Product]
    total: int
