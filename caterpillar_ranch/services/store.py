"""
Ranch store

The single object that owns all discount/cart state for one process.
Routes and tests construct or receive a RanchStore instead of reaching
for module-level singletons, so isolated instances never share state.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..core.config import Settings
from ..core.errors import NotFoundError, ReplayBlockedError, ValidationError
from ..core.session import BrowsingSession, SessionManager, utcnow
from ..core.storage import DurableStore, build_durable_store
from ..database.carts import CartDatabase
from ..database.discounts import PendingDiscountLedger
from ..database.games import ActiveGame, GameDatabase
from ..database.orders import OrderDatabase
from ..database.products import ProductDatabase
from ..models.checkout import Order
from ..models.game import GAME_DURATIONS, GameType
from .game_session import GameSession
from .shopper import Shopper
from .tiers import DEFAULT_TIERS, TierTable

logger = logging.getLogger(__name__)


class RanchStore:
    """Owns catalog, carts, ledgers, sessions, games and orders"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        durable_store: Optional[DurableStore] = None,
        catalog: Optional[ProductDatabase] = None,
        clock: Callable[[], datetime] = utcnow,
        tiers: TierTable = DEFAULT_TIERS,
    ):
        self.settings = settings or Settings()
        self.clock = clock
        self.tiers = tiers
        self.durable_store = durable_store or build_durable_store(self.settings.data_dir)
        self.catalog = catalog or ProductDatabase()
        self.sessions = SessionManager(clock=clock)
        self.carts = CartDatabase(
            self.durable_store,
            max_quantity=self.settings.max_line_quantity,
            badge_percent=self.settings.max_discount_badge_percent,
            clock=clock,
        )
        self.games = GameDatabase(max_total_discount=tiers.max_percent)
        self.orders = OrderDatabase(clock=clock)
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, cart_id: str) -> threading.RLock:
        with self._locks_guard:
            return self._locks.setdefault(cart_id, threading.RLock())

    def ledger(self, cart_id: str) -> PendingDiscountLedger:
        return PendingDiscountLedger(
            self.durable_store,
            owner_id=cart_id,
            ttl_seconds=self.settings.discount_ttl_seconds,
            clock=self.clock,
        )

    def shopper(self, cart_id: str, session: Optional[BrowsingSession] = None) -> Shopper:
        return Shopper(
            cart_id=cart_id,
            catalog=self.catalog,
            carts=self.carts,
            ledger=self.ledger(cart_id),
            lock=self._lock_for(cart_id),
            session=session,
            tiers=self.tiers,
        )

    # Games

    def start_game(
        self,
        cart_id: str,
        session: BrowsingSession,
        product_id: str,
        game_type: GameType,
        duration: Optional[int] = None,
    ) -> ActiveGame:
        """
        Start a play-through for a product.

        The product is marked played as soon as the game starts, so
        abandoning a bad run does not unlock an immediate replay.
        """
        self.catalog.require_product(product_id)
        try:
            game_type = GameType(game_type)
        except ValueError:
            raise ValidationError(f"Unknown game type: {game_type}")

        shopper = self.shopper(cart_id, session)
        if shopper.has_played(product_id):
            raise ReplayBlockedError(f"A game was already played for {product_id} this session")

        seconds = duration if duration is not None else GAME_DURATIONS.get(game_type, self.settings.game_duration_seconds)
        game_session = GameSession(seconds, label=f"{game_type.value}:{product_id}")
        shopper.mark_played(product_id)

        game = self.games.add_game(
            game_type=game_type,
            product_id=product_id,
            cart_id=cart_id,
            session_id=session.session_id,
            session=game_session,
            started_at=self.clock(),
        )
        game_session.on_complete(lambda _: self._finish_game(game))
        game_session.start()
        logger.info(f"[cart={cart_id}] game {game.game_id} started: {game_type.value} for {product_id} ({seconds}s)")
        return game

    def require_game(self, game_id: str) -> ActiveGame:
        game = self.games.get_game(game_id)
        if not game:
            raise NotFoundError(f"Game {game_id} not found")
        return game

    def _finish_game(self, game: ActiveGame) -> None:
        session = self.sessions.get_session(game.session_id)
        shopper = self.shopper(game.cart_id, session)
        score = game.session.score
        percent = shopper.record_game_result(game.product_id, score, game_type=game.game_type.value)
        self.games.record_completion(game, percent, self.clock())
        logger.info(f"[cart={game.cart_id}] game {game.game_id} finished: score={score} tier={percent}%")

    def tick(self) -> int:
        """One countdown tick for all running games"""
        return self.games.tick_all()

    # Checkout

    def checkout(self, cart_id: str) -> Order:
        """Snapshot the cart into an order, then clear it"""
        shopper = self.shopper(cart_id)
        with self._lock_for(cart_id):
            cart = self.carts.get_cart(cart_id)
            if not cart:
                raise NotFoundError(f"Cart {cart_id} not found")
            if not cart.items:
                raise ValidationError("Cart is empty")

            totals = shopper.totals(cart)
            order = self.orders.create_order(cart, totals)
            self.carts.clear_cart(cart_id)

        logger.info(f"Order {order.order_id} created from cart {cart_id}: ${order.totals.total}")
        return order

    # Maintenance

    def cleanup(self) -> dict[str, int]:
        """
        Periodic maintenance: end idle sessions, purge expired discounts,
        drop old finished games and their completions, evict unused locks.
        """
        sessions_ended = self.sessions.cleanup_old_sessions(self.settings.session_max_age_hours)

        discounts_purged = 0
        for key in list(self.durable_store.keys()):
            if key.startswith(PendingDiscountLedger.KEY_PREFIX):
                owner = key[len(PendingDiscountLedger.KEY_PREFIX):]
                with self._lock_for(owner):
                    discounts_purged += self.ledger(owner).purge_expired()

        games_discarded = self.games.discard_finished(
            self.clock() - timedelta(hours=self.settings.session_max_age_hours)
        )
        completions_pruned = self.games.prune_completions(set(self.sessions.sessions))
        return {
            "sessions_ended": sessions_ended,
            "discounts_purged": discounts_purged,
            "games_discarded": games_discarded,
            "completions_pruned": completions_pruned,
            "locks_evicted": self._evict_idle_locks(),
        }

    def _evict_idle_locks(self) -> int:
        """Forget locks of carts that have nothing stored and are not in use"""
        stored = set(self.durable_store.keys())
        evicted = 0
        with self._locks_guard:
            for cart_id, lock in list(self._locks.items()):
                if (
                    f"{CartDatabase.KEY_PREFIX}{cart_id}" in stored
                    or f"{PendingDiscountLedger.KEY_PREFIX}{cart_id}" in stored
                ):
                    continue
                if not lock.acquire(blocking=False):
                    continue
                try:
                    del self._locks[cart_id]
                    evicted += 1
                finally:
                    lock.release()
        return evicted

    @property
    def lock_count(self) -> int:
        return len(self._locks)
