"""Checkout models"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum

from .cart import CartItem, CartTotals


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class CheckoutRequest(BaseModel):
    """Request to check out a cart"""
    cart_id: str


class Order(BaseModel):
    """Finalized cart snapshot handed to order placement"""
    order_id: str
    cart_id: str
    status: OrderStatus
    items: list[CartItem]
    totals: CartTotals
    currency: str = "USD"
    created_at: datetime


class CheckoutResponse(BaseModel):
    """Response from checkout"""
    success: bool
    order: Optional[Order] = None
    error_message: Optional[str] = None
