"""Discount models"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class PendingDiscount(BaseModel):
    """Earned, not-yet-replaced discount for one product"""
    product_id: str
    percent: int
    earned_at: datetime
    expires_at: datetime
    game_type: Optional[str] = None

    def is_active(self, now: datetime) -> bool:
        return now < self.expires_at


class DiscountTier(BaseModel):
    """Minimum score that earns a discount percentage"""
    threshold: int
    percent: int


class NextThreshold(BaseModel):
    threshold: int
    points_needed: int
    percent: int


class DiscountResult(BaseModel):
    """Tier outcome of a finished game, with its themed copy"""
    percent: int
    message: str
    subtext: str
    emoji: str
    can_retry: bool


class PendingDiscountResponse(BaseModel):
    product_id: str
    discount: Optional[PendingDiscount] = None


class DiscountListResponse(BaseModel):
    cart_id: str
    discounts: list[PendingDiscount]
