"""Active games and completion log"""

import uuid
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..models.game import GameCompletion, GameStats, GameType, GameTypeStats
from ..services.game_session import GameSession

logger = logging.getLogger(__name__)


@dataclass
class ActiveGame:
    """A running or finished play-through and who it belongs to"""
    game_id: str
    game_type: GameType
    product_id: str
    cart_id: str
    session_id: str
    session: GameSession
    started_at: datetime


class GameDatabase:
    """In-memory storage for play-throughs and their outcomes"""

    def __init__(self, max_total_discount: int = 40):
        self.games: dict[str, ActiveGame] = {}
        self.completions: list[GameCompletion] = []
        self.max_total_discount = max_total_discount
        self._lock = threading.Lock()

    def add_game(
        self,
        game_type: GameType,
        product_id: str,
        cart_id: str,
        session_id: str,
        session: GameSession,
        started_at: datetime,
    ) -> ActiveGame:
        game = ActiveGame(
            game_id=str(uuid.uuid4()),
            game_type=game_type,
            product_id=product_id,
            cart_id=cart_id,
            session_id=session_id,
            session=session,
            started_at=started_at,
        )
        with self._lock:
            self.games[game.game_id] = game
        return game

    def get_game(self, game_id: str) -> Optional[ActiveGame]:
        return self.games.get(game_id)

    def playing(self) -> list[ActiveGame]:
        with self._lock:
            return [g for g in self.games.values() if g.session.is_playing]

    def tick_all(self) -> int:
        """One countdown tick for every running game; returns how many completed"""
        completed = 0
        for game in self.playing():
            if game.session.tick():
                completed += 1
        return completed

    def discard_finished(self, older_than: datetime) -> int:
        """Forget completed games started before the cutoff"""
        with self._lock:
            stale = [
                gid for gid, g in self.games.items()
                if g.session.is_completed and g.started_at < older_than
            ]
            for gid in stale:
                del self.games[gid]
        return len(stale)

    def record_completion(self, game: ActiveGame, discount_earned: int, completed_at: datetime) -> GameCompletion:
        completion = GameCompletion(
            game_id=game.game_id,
            session_id=game.session_id,
            cart_id=game.cart_id,
            game_type=game.game_type,
            product_id=game.product_id,
            score=game.session.score,
            discount_earned=discount_earned,
            completed_at=completed_at,
        )
        with self._lock:
            self.completions.append(completion)
        return completion

    def prune_completions(self, live_session_ids: set[str]) -> int:
        """Drop completions of sessions that have ended; returns how many"""
        with self._lock:
            kept = [c for c in self.completions if c.session_id in live_session_ids]
            removed = len(self.completions) - len(kept)
            self.completions = kept
        return removed

    def completions_for(self, session_id: str) -> list[GameCompletion]:
        with self._lock:
            found = [c for c in self.completions if c.session_id == session_id]
        found.sort(key=lambda c: c.completed_at, reverse=True)
        return found

    def stats(self, session_id: str) -> GameStats:
        """Aggregate completions for a browsing session"""
        completions = self.completions_for(session_id)
        total = len(completions)

        by_type: dict[str, GameTypeStats] = {}
        scores_by_type: dict[str, list[int]] = {}
        for c in completions:
            entry = by_type.setdefault(c.game_type.value, GameTypeStats())
            entry.count += 1
            entry.total_discount += c.discount_earned
            scores_by_type.setdefault(c.game_type.value, []).append(c.score)

        for game_type, scores in scores_by_type.items():
            by_type[game_type].average_score = sum(scores) / len(scores)

        return GameStats(
            session_id=session_id,
            total_games_played=total,
            total_discount_earned=min(
                sum(c.discount_earned for c in completions), self.max_total_discount
            ),
            average_score=(sum(c.score for c in completions) / total) if total else 0.0,
            by_game_type=by_type,
        )
