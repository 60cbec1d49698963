# Discount and cart services

from .tiers import TierTable, DEFAULT_TIERS, tier_for, discount_result, progress_message
from .game_session import GameSession

__all__ = [
    "TierTable",
    "DEFAULT_TIERS",
    "tier_for",
    "discount_result",
    "progress_message",
    "GameSession",
]
