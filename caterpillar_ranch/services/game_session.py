"""
Game scoring state machine

One GameSession tracks a single play-through:

    idle -> playing -> completed

The countdown is driven by calling tick() once per second from a single
scheduler; the tick is the only place a timeout transition happens.
Completion is idempotent: whichever of tick() or end() gets there first
wins, later attempts are no-ops. Score deltas outside `playing` are
ignored rather than raised, so a misbehaving mini-game UI cannot crash
the core.
"""

import logging
from typing import Callable, Optional

from ..core.errors import ValidationError
from ..models.game import GameStatus

logger = logging.getLogger(__name__)

CompletionCallback = Callable[["GameSession"], None]


class GameSession:
    """Score, timer and status for one play-through"""

    def __init__(
        self,
        duration: int,
        on_complete: Optional[CompletionCallback] = None,
        label: str = "game",
    ):
        if duration <= 0:
            raise ValidationError("game duration must be positive")
        self.duration = duration
        self.label = label
        self.status = GameStatus.IDLE
        self.score = 0
        self.time_remaining = duration
        self._listeners: list[CompletionCallback] = []
        if on_complete:
            self._listeners.append(on_complete)

    @property
    def is_playing(self) -> bool:
        return self.status == GameStatus.PLAYING

    @property
    def is_completed(self) -> bool:
        return self.status == GameStatus.COMPLETED

    @property
    def final_score(self) -> Optional[int]:
        """Score once the game has completed, None before that"""
        return self.score if self.is_completed else None

    def on_complete(self, callback: CompletionCallback) -> None:
        self._listeners.append(callback)

    def start(self) -> bool:
        """Begin the countdown. Only an idle session can start."""
        if self.status != GameStatus.IDLE:
            logger.warning(f"{self.label}: start() ignored in status {self.status.value}")
            return False
        self.status = GameStatus.PLAYING
        self.score = 0
        self.time_remaining = self.duration
        logger.debug(f"{self.label}: started ({self.duration}s)")
        return True

    def add_points(self, points: int) -> int:
        if self.is_playing:
            self.score = max(0, self.score + points)
        return self.score

    def subtract_points(self, points: int) -> int:
        if self.is_playing:
            self.score = max(0, self.score - points)
        return self.score

    def tick(self) -> bool:
        """
        Advance the countdown by one second.

        Returns True only for the tick that completed the game.
        """
        if not self.is_playing:
            return False
        self.time_remaining = max(0, self.time_remaining - 1)
        if self.time_remaining == 0:
            return self._complete("timer")
        return False

    def end(self) -> bool:
        """Manual completion (player forfeits or the mini-game finished early)"""
        if self.status == GameStatus.IDLE:
            # Nothing was played; complete with a zero score
            self.time_remaining = 0
        return self._complete("manual")

    def _complete(self, reason: str) -> bool:
        if self.is_completed:
            return False
        self.status = GameStatus.COMPLETED
        logger.info(f"{self.label}: completed by {reason} with score {self.score}")
        for listener in list(self._listeners):
            listener(self)
        return True
