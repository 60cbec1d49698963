"""Tests for the store: games, discounts and cart working together."""
import threading
from decimal import Decimal

import pytest

from caterpillar_ranch.core.errors import NotFoundError, ReplayBlockedError, ValidationError
from caterpillar_ranch.models.game import GameStatus, GameType
from caterpillar_ranch.services.scheduler import CountdownScheduler
from caterpillar_ranch.services.tiers import tier_for

TEE = "cr-001"
TEE_BLACK_M = "cr-001-black-m"


def test_end_to_end_discount_lock_and_expiry(store, shopper, clock):
    percent = tier_for(47)
    assert percent == 40
    shopper.ledger.earn(TEE, percent)

    cart, first = shopper.add_to_cart(TEE, TEE_BLACK_M, 1)
    assert len(cart.items) == 1
    assert first.earned_discount_percent == 40
    assert shopper.totals().lines[0].final_price == Decimal("18.00")

    clock.advance(minutes=31)
    cart, second = shopper.add_to_cart(TEE, TEE_BLACK_M, 1)

    assert len(cart.items) == 2
    assert second.earned_discount_percent == 0
    totals = shopper.totals()
    assert totals.lines[1].final_price == Decimal("30.00")
    assert totals.subtotal == Decimal("60.00")
    assert totals.total_discount == Decimal("12.00")
    assert totals.total == Decimal("48.00")


def test_locked_discount_survives_ledger_changes(shopper):
    shopper.ledger.earn(TEE, 20)
    _, line = shopper.add_to_cart(TEE, TEE_BLACK_M, 1)

    shopper.ledger.earn(TEE, 40)
    shopper.ledger.earn(TEE, 0)

    assert shopper.cart().items[0].id == line.id
    assert shopper.cart().items[0].earned_discount_percent == 20


def test_pending_change_between_adds_opens_new_line(shopper):
    shopper.ledger.earn(TEE, 10)
    shopper.add_to_cart(TEE, TEE_BLACK_M, 1)
    shopper.add_to_cart(TEE, TEE_BLACK_M, 1)
    shopper.ledger.earn(TEE, 20)
    cart, _ = shopper.add_to_cart(TEE, TEE_BLACK_M, 1)

    assert [(i.earned_discount_percent, i.quantity) for i in cart.items] == [(10, 2), (20, 1)]


def test_add_unknown_product(shopper):
    with pytest.raises(NotFoundError):
        shopper.add_to_cart("cr-999", "x", 1)


def test_game_completion_by_timer_earns_discount(store, session):
    game = store.start_game("cart-1", session, TEE, GameType.CHRYSALIS_PULSE, duration=3)
    game.session.add_points(36)

    scheduler = CountdownScheduler(tick=store.tick)
    assert scheduler.advance(2) == 0
    assert scheduler.advance(1) == 1

    assert game.session.status == GameStatus.COMPLETED
    assert store.ledger("cart-1").redeem(TEE) == 30

    # Manual end racing the timer changes nothing
    assert game.session.end() is False
    assert len(store.games.completions_for(session.session_id)) == 1


def test_zero_score_clears_previous_discount(store, session):
    store.ledger("cart-1").earn(TEE, 20)
    game = store.start_game("cart-1", session, TEE, GameType.THE_CULLING)
    game.session.add_points(4)
    game.session.end()

    assert store.ledger("cart-1").peek(TEE) is None


def test_replay_blocked_within_session(store, session):
    store.start_game("cart-1", session, TEE, GameType.THE_CULLING)

    with pytest.raises(ReplayBlockedError):
        store.start_game("cart-1", session, TEE, GameType.CURSED_HARVEST)

    # Other products stay playable
    store.start_game("cart-1", session, "cr-002", GameType.MIDNIGHT_GARDEN)


def test_replay_allowed_in_new_session(store, session):
    game = store.start_game("cart-1", session, TEE, GameType.THE_CULLING)
    game.session.add_points(12)
    game.session.end()
    store.sessions.end_session(session.session_id)

    later = store.sessions.create_session()
    replay = store.start_game("cart-1", later, TEE, GameType.THE_CULLING)
    replay.session.add_points(50)
    replay.session.end()

    assert store.ledger("cart-1").redeem(TEE) == 40


def test_start_game_uses_game_duration(store, session):
    game = store.start_game("cart-1", session, TEE, GameType.HUNGRY_CATERPILLAR)
    assert game.session.time_remaining == 45


def test_start_game_validation(store, session):
    with pytest.raises(NotFoundError):
        store.start_game("cart-1", session, "cr-999", GameType.THE_CULLING)
    with pytest.raises(ValidationError):
        store.start_game("cart-1", session, TEE, "snake")
    with pytest.raises(ValidationError):
        store.start_game("cart-1", session, TEE, GameType.THE_CULLING, duration=0)


def test_game_stats(store):
    first = store.sessions.create_session()
    for product_id, game_type, score in [
        (TEE, GameType.THE_CULLING, 47),
        ("cr-002", GameType.THE_CULLING, 21),
        ("cr-003", GameType.LARVA_LAUNCH, 5),
    ]:
        game = store.start_game("cart-1", first, product_id, game_type)
        game.session.add_points(score)
        game.session.end()

    stats = store.games.stats(first.session_id)
    assert stats.total_games_played == 3
    assert stats.total_discount_earned == 40
    assert stats.average_score == pytest.approx(73 / 3)
    assert stats.by_game_type["the-culling"].count == 2
    assert stats.by_game_type["the-culling"].total_discount == 60
    assert stats.by_game_type["the-culling"].average_score == 34
    assert stats.by_game_type["larva-launch"].total_discount == 0


def test_checkout_snapshots_and_clears(store, shopper):
    shopper.ledger.earn(TEE, 40)
    shopper.add_to_cart(TEE, TEE_BLACK_M, 2)

    order = store.checkout("cart-1")

    assert order.totals.total == Decimal("36.00")
    assert order.items[0].earned_discount_percent == 40
    assert shopper.cart().items == []
    assert store.orders.get_order(order.order_id) == order


def test_checkout_empty_cart_rejected(store):
    store.carts.get_or_create_cart("cart-1")
    with pytest.raises(ValidationError):
        store.checkout("cart-1")
    with pytest.raises(NotFoundError):
        store.checkout("cart-unknown")


def test_cleanup_purges_expired_discounts(store, clock):
    store.ledger("cart-1").earn(TEE, 20)
    store.ledger("cart-2").earn(TEE, 30)
    clock.advance(minutes=45)

    result = store.cleanup()
    assert result["discounts_purged"] == 2


def test_reading_unknown_carts_leaves_nothing_behind(store, durable_store):
    for i in range(50):
        shopper = store.shopper(f"ghost-{i}")
        assert shopper.cart().items == []
        assert shopper.clear_cart().items == []

    assert list(durable_store.keys()) == []
    assert store.lock_count == 50

    result = store.cleanup()
    assert result["locks_evicted"] == 50
    assert store.lock_count == 0


def test_cleanup_keeps_locks_of_stored_carts(store, shopper):
    shopper.add_to_cart(TEE, TEE_BLACK_M, 1)
    store.ledger("cart-2").earn(TEE, 20)
    store.shopper("cart-2")
    store.shopper("ghost")

    assert store.cleanup()["locks_evicted"] == 1
    assert store.lock_count == 2


def test_cleanup_prunes_completions_of_ended_sessions(store, session):
    game = store.start_game("cart-1", session, TEE, GameType.THE_CULLING)
    game.session.end()
    assert store.cleanup()["completions_pruned"] == 0

    store.sessions.end_session(session.session_id)
    assert store.cleanup()["completions_pruned"] == 1
    assert store.games.stats(session.session_id).total_games_played == 0


def test_concurrent_adds_and_results_stay_consistent(store, session):
    adders = 40
    store.shopper("cart-1", session).record_game_result(TEE, 12)
    start = threading.Barrier(adders + 1)
    locked = []

    def add():
        start.wait()
        _, item = store.shopper("cart-1", session).add_to_cart(TEE, TEE_BLACK_M, 1)
        locked.append(item.earned_discount_percent)

    def replay_results():
        start.wait()
        for score in [25, 12] * 10:
            store.shopper("cart-1", session).record_game_result(TEE, score)

    threads = [threading.Thread(target=add) for _ in range(adders)]
    threads.append(threading.Thread(target=replay_results))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert len(locked) == adders
    assert set(locked) <= {10, 20}

    cart = store.shopper("cart-1").cart()
    assert sum(i.quantity for i in cart.items) == adders
    keys = [i.merge_key() for i in cart.items]
    assert len(keys) == len(set(keys))
    for percent in (10, 20):
        line_quantity = sum(i.quantity for i in cart.items if i.earned_discount_percent == percent)
        assert line_quantity == locked.count(percent)
