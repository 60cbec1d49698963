"""Cart models"""

from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from .product import ProductSize


class CartItem(BaseModel):
    """
    One cart line.

    earned_discount_percent is locked when the line is created and never
    changes afterwards; lines only merge when product, variant and locked
    discount all match.
    """
    id: str
    product_id: str
    product_name: str
    variant_id: str
    size: ProductSize
    color: str
    quantity: int = Field(ge=1, le=99)
    earned_discount_percent: int = 0
    added_at: datetime

    def merge_key(self) -> tuple[str, str, int]:
        return (self.product_id, self.variant_id, self.earned_discount_percent)


class Cart(BaseModel):
    """Shopping cart"""
    cart_id: str
    items: list[CartItem] = []
    created_at: datetime
    updated_at: datetime


class CartLineTotals(BaseModel):
    """Price breakdown for one line"""
    line_id: str
    unit_price: Decimal
    quantity: int
    earned_discount_percent: int
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal


class CartTotals(BaseModel):
    """Cart totals snapshot"""
    item_count: int = 0
    subtotal: Decimal = Decimal("0.00")
    total_discount: Decimal = Decimal("0.00")
    effective_discount_percent: Decimal = Decimal("0.0")
    total: Decimal = Decimal("0.00")
    savings: Decimal = Decimal("0.00")
    max_discount_reached: bool = False
    lines: list[CartLineTotals] = []


class AddToCartRequest(BaseModel):
    """Request to add item to cart"""
    product_id: str
    variant_id: str
    quantity: int = 1


class UpdateCartItemRequest(BaseModel):
    """Request to update cart line quantity"""
    quantity: int


class CartResponse(BaseModel):
    """Cart API response"""
    cart: Cart
    totals: CartTotals
    message: Optional[str] = None
