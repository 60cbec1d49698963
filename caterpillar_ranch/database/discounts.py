"""Pending discount ledger"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..core.session import utcnow
from ..core.storage import DurableStore, require_scope
from ..models.discount import PendingDiscount
from ..services.tiers import validate_percent

logger = logging.getLogger(__name__)


class PendingDiscountLedger:
    """
    At most one not-yet-replaced discount per product, kept in the durable
    store under one key per owner (the cart/profile id).

    Entries are consumed only by replacement or expiry; redeeming a
    discount onto a cart line leaves it in place so further lines can be
    added at the same price until it lapses.
    """

    KEY_PREFIX = "discounts:"

    def __init__(
        self,
        store: DurableStore,
        owner_id: str,
        ttl_seconds: int = 30 * 60,
        clock: Callable[[], datetime] = utcnow,
    ):
        require_scope(store, DurableStore, "PendingDiscountLedger")
        self.store = store
        self.owner_id = owner_id
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    @property
    def key(self) -> str:
        return f"{self.KEY_PREFIX}{self.owner_id}"

    def _load(self) -> dict[str, PendingDiscount]:
        raw = self.store.get(self.key) or {}
        return {pid: PendingDiscount.model_validate(entry) for pid, entry in raw.items()}

    def _save(self, entries: dict[str, PendingDiscount]) -> None:
        if entries:
            self.store.put(self.key, {pid: d.model_dump(mode="json") for pid, d in entries.items()})
        else:
            self.store.delete(self.key)

    def earn(self, product_id: str, percent: int, game_type: Optional[str] = None) -> Optional[PendingDiscount]:
        """
        Record a newly earned discount, replacing any entry for the product.

        A 0% result clears the product's pending discount instead of
        writing one.
        """
        validate_percent(percent)
        entries = self._load()
        previous = entries.pop(product_id, None)

        if percent == 0:
            if previous:
                self._save(entries)
                logger.info(f"[{self.owner_id}] pending discount cleared for {product_id}")
            return None

        now = self._clock()
        discount = PendingDiscount(
            product_id=product_id,
            percent=percent,
            earned_at=now,
            expires_at=now + self.ttl,
            game_type=game_type,
        )
        entries[product_id] = discount
        self._save(entries)

        if previous:
            logger.info(f"[{self.owner_id}] pending discount for {product_id} replaced: {previous.percent}% -> {percent}%")
        else:
            logger.info(f"[{self.owner_id}] pending discount earned for {product_id}: {percent}%")
        return discount

    def peek(self, product_id: str) -> Optional[PendingDiscount]:
        """Active discount for the product; expired entries read as absent"""
        discount = self._load().get(product_id)
        if discount and discount.is_active(self._clock()):
            return discount
        return None

    def redeem(self, product_id: str) -> int:
        """Percent to lock onto a new cart line (0 if none or expired)"""
        discount = self.peek(product_id)
        return discount.percent if discount else 0

    def active(self) -> list[PendingDiscount]:
        now = self._clock()
        return sorted(
            (d for d in self._load().values() if d.is_active(now)),
            key=lambda d: d.earned_at,
        )

    def purge_expired(self) -> int:
        """Drop expired entries from storage; returns how many were removed"""
        now = self._clock()
        entries = self._load()
        live = {pid: d for pid, d in entries.items() if d.is_active(now)}
        removed = len(entries) - len(live)
        if removed:
            self._save(live)
            logger.info(f"[{self.owner_id}] purged {removed} expired discount(s)")
        return removed

    def clear(self) -> None:
        self.store.delete(self.key)
