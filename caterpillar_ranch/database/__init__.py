# Database modules

from .products import ProductDatabase
from .carts import CartDatabase
from .discounts import PendingDiscountLedger
from .play_gate import SessionPlayGate
from .games import GameDatabase, ActiveGame
from .orders import OrderDatabase

__all__ = [
    "ProductDatabase",
    "CartDatabase",
    "PendingDiscountLedger",
    "SessionPlayGate",
    "GameDatabase",
    "ActiveGame",
    "OrderDatabase",
]
