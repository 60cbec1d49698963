# Caterpillar Ranch Models

from .product import Product, ProductSize, Variant, ProductListResponse
from .cart import (
    Cart,
    CartItem,
    CartLineTotals,
    CartTotals,
    AddToCartRequest,
    UpdateCartItemRequest,
    CartResponse,
)
from .discount import (
    PendingDiscount,
    DiscountTier,
    NextThreshold,
    DiscountResult,
    PendingDiscountResponse,
    DiscountListResponse,
)
from .game import (
    GameStatus,
    GameType,
    GAME_DURATIONS,
    GameCompletion,
    GameStats,
    GameTypeStats,
    StartGameRequest,
    PointsRequest,
    GameStateResponse,
)
from .checkout import Order, OrderStatus, CheckoutRequest, CheckoutResponse

__all__ = [
    "Product",
    "ProductSize",
    "Variant",
    "ProductListResponse",
    "Cart",
    "CartItem",
    "CartLineTotals",
    "CartTotals",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "CartResponse",
    "PendingDiscount",
    "DiscountTier",
    "NextThreshold",
    "DiscountResult",
    "PendingDiscountResponse",
    "DiscountListResponse",
    "GameStatus",
    "GameType",
    "GAME_DURATIONS",
    "GameCompletion",
    "GameStats",
    "GameTypeStats",
    "StartGameRequest",
    "PointsRequest",
    "GameStateResponse",
    "Order",
    "OrderStatus",
    "CheckoutRequest",
    "CheckoutResponse",
]
