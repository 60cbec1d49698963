"""Order storage"""

import uuid
from datetime import datetime
from typing import Callable, Optional

from ..core.session import utcnow
from ..models.checkout import Order, OrderStatus
from ..models.cart import Cart, CartTotals


class OrderDatabase:
    """In-memory order storage; receives finalized cart snapshots"""

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self.orders: dict[str, Order] = {}
        self._clock = clock

    def create_order(self, cart: Cart, totals: CartTotals) -> Order:
        """Create an order from a cart snapshot"""
        order = Order(
            order_id=f"ORD-{uuid.uuid4().hex[:8].upper()}",
            cart_id=cart.cart_id,
            status=OrderStatus.PENDING,
            items=[item.model_copy() for item in cart.items],
            totals=totals.model_copy(deep=True),
            created_at=self._clock(),
        )
        self.orders[order.order_id] = order
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID"""
        return self.orders.get(order_id)

    def list_orders(self, limit: int = 50) -> list[Order]:
        """List recent orders"""
        orders = list(self.orders.values())
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders[:limit]
