"""Mini-game models"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum


class GameStatus(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    COMPLETED = "completed"


class GameType(str, Enum):
    """Mini-games that feed the scoring state machine"""
    THE_CULLING = "the-culling"
    CURSED_HARVEST = "cursed-harvest"
    BUG_TELEGRAM = "bug-telegram"
    HUNGRY_CATERPILLAR = "hungry-caterpillar"
    LARVA_LAUNCH = "larva-launch"
    PATH_OF_THE_PUPA = "path-of-the-pupa"
    MIDNIGHT_GARDEN = "midnight-garden"
    METAMORPHOSIS_QUEUE = "metamorphosis-queue"
    CHRYSALIS_PULSE = "chrysalis-pulse"


# Countdown length per game, in seconds
GAME_DURATIONS: dict[GameType, int] = {
    GameType.THE_CULLING: 25,
    GameType.CURSED_HARVEST: 20,
    GameType.BUG_TELEGRAM: 30,
    GameType.HUNGRY_CATERPILLAR: 45,
    GameType.LARVA_LAUNCH: 20,
    GameType.PATH_OF_THE_PUPA: 20,
    GameType.MIDNIGHT_GARDEN: 25,
    GameType.METAMORPHOSIS_QUEUE: 25,
    GameType.CHRYSALIS_PULSE: 25,
}


class GameCompletion(BaseModel):
    """Record of one finished play-through"""
    game_id: str
    session_id: str
    cart_id: str
    game_type: GameType
    product_id: str
    score: int
    discount_earned: int
    completed_at: datetime


class GameTypeStats(BaseModel):
    count: int = 0
    total_discount: int = 0
    average_score: float = 0.0


class GameStats(BaseModel):
    """Aggregate completions for one browsing session"""
    session_id: str
    total_games_played: int
    total_discount_earned: int
    average_score: float
    by_game_type: dict[str, GameTypeStats]


class StartGameRequest(BaseModel):
    """Request to start a mini-game for a product"""
    cart_id: str
    product_id: str
    game_type: GameType
    duration: Optional[int] = None


class PointsRequest(BaseModel):
    """Score delta reported by the mini-game UI; negative values are penalties"""
    delta: int


class GameStateResponse(BaseModel):
    """Current state of a play-through"""
    game_id: str
    game_type: GameType
    product_id: str
    status: GameStatus
    score: int
    time_remaining: int
    progress_message: str
    discount_percent: Optional[int] = None
    result_message: Optional[str] = None
    result_subtext: Optional[str] = None
    can_retry: Optional[bool] = None
