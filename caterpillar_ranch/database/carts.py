"""Cart storage and totals"""

import uuid
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional

from ..core.errors import NotFoundError, ValidationError
from ..core.session import utcnow
from ..core.storage import DurableStore, require_scope
from ..models.cart import Cart, CartItem, CartLineTotals, CartTotals
from ..models.product import Product
from ..services.tiers import validate_percent

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
TENTH = Decimal("0.1")


def money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class CartDatabase:
    """
    Durable cart storage.

    Every mutation is written through to the durable store before the
    method returns. Failed validation leaves the stored cart untouched.
    """

    KEY_PREFIX = "cart:"
    MAX_QUANTITY = 99
    MAX_DISCOUNT_BADGE_PERCENT = 40

    def __init__(
        self,
        store: DurableStore,
        max_quantity: int = MAX_QUANTITY,
        badge_percent: int = MAX_DISCOUNT_BADGE_PERCENT,
        clock: Callable[[], datetime] = utcnow,
    ):
        require_scope(store, DurableStore, "CartDatabase")
        self.store = store
        self.max_quantity = max_quantity
        self.badge_percent = badge_percent
        self._clock = clock

    def _key(self, cart_id: str) -> str:
        return f"{self.KEY_PREFIX}{cart_id}"

    def _save(self, cart: Cart) -> None:
        cart.updated_at = self._clock()
        self.store.put(self._key(cart.cart_id), cart.model_dump(mode="json"))

    def _validate_quantity(self, quantity: int) -> None:
        if not 1 <= quantity <= self.max_quantity:
            raise ValidationError(f"quantity must be between 1 and {self.max_quantity}, got {quantity}")

    def get_cart(self, cart_id: str) -> Optional[Cart]:
        """Get a cart by ID"""
        raw = self.store.get(self._key(cart_id))
        return Cart.model_validate(raw) if raw is not None else None

    def view_cart(self, cart_id: str) -> Cart:
        """Stored cart, or an unsaved empty one for an id never written to"""
        cart = self.get_cart(cart_id)
        if cart:
            return cart
        now = self._clock()
        return Cart(cart_id=cart_id, items=[], created_at=now, updated_at=now)

    def get_or_create_cart(self, cart_id: str) -> Cart:
        """Get existing cart or create an empty one on first use"""
        cart = self.get_cart(cart_id)
        if cart:
            return cart
        now = self._clock()
        cart = Cart(cart_id=cart_id, items=[], created_at=now, updated_at=now)
        self._save(cart)
        return cart

    def add_item(
        self,
        cart_id: str,
        product: Product,
        variant_id: str,
        quantity: int = 1,
        locked_discount_percent: int = 0,
    ) -> tuple[Cart, CartItem]:
        """
        Add a product variant with an already-locked discount.

        Merges into an existing line only when product, variant and locked
        discount all match; otherwise opens a new line.
        """
        self._validate_quantity(quantity)
        validate_percent(locked_discount_percent)

        variant = product.get_variant(variant_id)
        if not variant:
            raise ValidationError(f"Variant {variant_id} does not belong to product {product.id}")
        if not variant.in_stock:
            raise ValidationError(f"Variant {variant_id} is out of stock")

        cart = self.get_or_create_cart(cart_id)
        merge_key = (product.id, variant_id, locked_discount_percent)

        existing_item = next(
            (item for item in cart.items if item.merge_key() == merge_key),
            None,
        )

        if existing_item:
            new_quantity = existing_item.quantity + quantity
            if new_quantity > self.max_quantity:
                raise ValidationError(
                    f"line {existing_item.id} would reach {new_quantity}, above the limit of {self.max_quantity}"
                )
            existing_item.quantity = new_quantity
            item = existing_item
            logger.info(f"[cart={cart_id}] merged {quantity}x {product.id}/{variant_id} @ {locked_discount_percent}% into {item.id}")
        else:
            item = CartItem(
                id=str(uuid.uuid4()),
                product_id=product.id,
                product_name=product.name,
                variant_id=variant_id,
                size=variant.size,
                color=variant.color,
                quantity=quantity,
                earned_discount_percent=locked_discount_percent,
                added_at=self._clock(),
            )
            cart.items.append(item)
            logger.info(f"[cart={cart_id}] new line {item.id}: {quantity}x {product.id}/{variant_id} @ {locked_discount_percent}%")

        self._save(cart)
        return cart, item

    def _find_line(self, cart: Optional[Cart], cart_id: str, line_id: str) -> tuple[Cart, CartItem]:
        if not cart:
            raise NotFoundError(f"Cart {cart_id} not found")
        item = next((i for i in cart.items if i.id == line_id), None)
        if not item:
            raise NotFoundError(f"Line {line_id} not in cart {cart_id}")
        return cart, item

    def update_item_quantity(self, cart_id: str, line_id: str, quantity: int) -> Cart:
        """Set a line's quantity; use remove_item to drop a line"""
        self._validate_quantity(quantity)
        cart, item = self._find_line(self.get_cart(cart_id), cart_id, line_id)
        item.quantity = quantity
        self._save(cart)
        logger.info(f"[cart={cart_id}] line {line_id} quantity -> {quantity}")
        return cart

    def remove_item(self, cart_id: str, line_id: str) -> Cart:
        """Remove a line from the cart"""
        cart, _ = self._find_line(self.get_cart(cart_id), cart_id, line_id)
        cart.items = [i for i in cart.items if i.id != line_id]
        self._save(cart)
        logger.info(f"[cart={cart_id}] line {line_id} removed")
        return cart

    def clear_cart(self, cart_id: str) -> Cart:
        """Clear all items from cart; an unknown cart is left unwritten"""
        cart = self.get_cart(cart_id)
        if not cart:
            return self.view_cart(cart_id)
        cart.items = []
        self._save(cart)
        logger.info(f"[cart={cart_id}] cleared")
        return cart

    def exists(self, cart_id: str) -> bool:
        return self.store.get(self._key(cart_id)) is not None

    def delete_cart(self, cart_id: str) -> bool:
        """Delete a cart"""
        return self.store.delete(self._key(cart_id))

    def compute_totals(self, cart: Cart, price_of: Callable[[str], Decimal]) -> CartTotals:
        """
        Totals from full pre-discount prices.

        Line amounts are rounded to the cent first; cart totals are sums of
        the rounded line amounts, so the breakdown always adds up.

        The maximum-discount flag looks at the composite cart percentage,
        not at any single line; it is informational and never caps.
        """
        if not cart.items:
            return CartTotals()

        lines: list[CartLineTotals] = []
        subtotal = Decimal("0")
        total_discount = Decimal("0")

        for item in cart.items:
            unit_price = price_of(item.product_id)
            original = money(unit_price * item.quantity)
            discount = money(original * item.earned_discount_percent / Decimal(100))
            subtotal += original
            total_discount += discount
            lines.append(
                CartLineTotals(
                    line_id=item.id,
                    unit_price=money(unit_price),
                    quantity=item.quantity,
                    earned_discount_percent=item.earned_discount_percent,
                    original_price=original,
                    discount_amount=discount,
                    final_price=original - discount,
                )
            )

        effective = (
            (total_discount / subtotal * 100).quantize(TENTH, rounding=ROUND_HALF_UP)
            if subtotal > 0
            else Decimal("0.0")
        )

        return CartTotals(
            item_count=sum(item.quantity for item in cart.items),
            subtotal=subtotal,
            total_discount=total_discount,
            effective_discount_percent=effective,
            total=subtotal - total_discount,
            savings=total_discount,
            max_discount_reached=effective >= self.badge_percent,
            lines=lines,
        )
