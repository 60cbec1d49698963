"""
Shopper context

Binds one durable cart/profile id to one browsing session and exposes the
controlled mutation entry points used by the storefront:

- add_to_cart: redeem the pending discount and lock it onto a line
- record_game_result: map a final score to a tier and earn it
- update_quantity / remove_from_cart / clear_cart

Every read-then-write sequence runs under the per-cart lock, so a
discount redeemed for a line is always the one that line is stored with.
"""

import logging
import threading
from typing import Optional

from ..core.session import BrowsingSession
from ..database.carts import CartDatabase
from ..database.discounts import PendingDiscountLedger
from ..database.play_gate import SessionPlayGate
from ..database.products import ProductDatabase
from ..models.cart import Cart, CartItem, CartTotals
from ..models.discount import PendingDiscount
from .tiers import DEFAULT_TIERS, TierTable

logger = logging.getLogger(__name__)


class Shopper:
    """One customer's cart, ledger and (optionally) play-gate"""

    def __init__(
        self,
        cart_id: str,
        catalog: ProductDatabase,
        carts: CartDatabase,
        ledger: PendingDiscountLedger,
        lock: threading.RLock,
        session: Optional[BrowsingSession] = None,
        tiers: TierTable = DEFAULT_TIERS,
    ):
        self.cart_id = cart_id
        self.catalog = catalog
        self.carts = carts
        self.ledger = ledger
        self.session = session
        self.play_gate = SessionPlayGate(session.store) if session else None
        self.tiers = tiers
        self._lock = lock

    # Play-gate

    def has_played(self, product_id: str) -> bool:
        return bool(self.play_gate and self.play_gate.has_played(product_id))

    def mark_played(self, product_id: str) -> None:
        if self.play_gate:
            self.play_gate.mark_played(product_id)

    # Discounts

    def pending_discount(self, product_id: str) -> Optional[PendingDiscount]:
        return self.ledger.peek(product_id)

    def record_game_result(self, product_id: str, score: int, game_type: Optional[str] = None) -> int:
        """Turn a final score into a pending discount; returns the tier percent"""
        percent = self.tiers.tier_for(score)
        with self._lock:
            self.ledger.earn(product_id, percent, game_type=game_type)
            self.mark_played(product_id)
        return percent

    # Cart

    def cart(self) -> Cart:
        return self.carts.view_cart(self.cart_id)

    def totals(self, cart: Optional[Cart] = None) -> CartTotals:
        return self.carts.compute_totals(cart or self.cart(), self.catalog.price_of)

    def add_to_cart(self, product_id: str, variant_id: str, quantity: int = 1) -> tuple[Cart, CartItem]:
        """Add a variant, locking whatever discount is pending for the product right now"""
        product = self.catalog.require_product(product_id)
        with self._lock:
            locked = self.ledger.redeem(product_id)
            return self.carts.add_item(
                self.cart_id,
                product,
                variant_id,
                quantity=quantity,
                locked_discount_percent=locked,
            )

    def update_quantity(self, line_id: str, quantity: int) -> Cart:
        with self._lock:
            return self.carts.update_item_quantity(self.cart_id, line_id, quantity)

    def remove_from_cart(self, line_id: str) -> Cart:
        with self._lock:
            return self.carts.remove_item(self.cart_id, line_id)

    def clear_cart(self) -> Cart:
        with self._lock:
            return self.carts.clear_cart(self.cart_id)
