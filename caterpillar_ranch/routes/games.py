"""Mini-game API routes"""

from fastapi import APIRouter, HTTPException, Depends

from ..core.errors import NotFoundError, ReplayBlockedError, ValidationError
from ..core.session import BrowsingSession
from ..core.session_middleware import require_session
from ..database.games import ActiveGame
from ..models.discount import DiscountTier
from ..models.game import (
    GameStateResponse,
    GameStats,
    PointsRequest,
    StartGameRequest,
)
from ..services.store import RanchStore
from ..services.tiers import discount_result, progress_message
from .deps import get_store

router = APIRouter(prefix="/api/games", tags=["Games"])


def _state(game: ActiveGame, store: RanchStore) -> GameStateResponse:
    session = game.session
    response = GameStateResponse(
        game_id=game.game_id,
        game_type=game.game_type,
        product_id=game.product_id,
        status=session.status,
        score=session.score,
        time_remaining=session.time_remaining,
        progress_message=progress_message(session.score, store.tiers),
    )
    if session.is_completed:
        result = discount_result(session.score, store.tiers)
        response.discount_percent = result.percent
        response.result_message = result.message
        response.result_subtext = result.subtext
        response.can_retry = result.can_retry
    return response


def _get_game(game_id: str, store: RanchStore) -> ActiveGame:
    try:
        return store.require_game(game_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("", response_model=GameStateResponse)
async def start_game(
    request: StartGameRequest,
    session: BrowsingSession = Depends(require_session),
    store: RanchStore = Depends(get_store),
):
    """
    Start a mini-game for a product.

    Rejected with 409 when a game was already started for the product in
    this browsing session.
    """
    try:
        game = store.start_game(
            cart_id=request.cart_id,
            session=session,
            product_id=request.product_id,
            game_type=request.game_type,
            duration=request.duration,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ReplayBlockedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(game, store)


@router.get("/tiers", response_model=list[DiscountTier])
async def list_tiers(store: RanchStore = Depends(get_store)):
    """Score thresholds, highest first"""
    return list(store.tiers.tiers)


@router.get("/stats/{session_id}", response_model=GameStats)
async def get_stats(session_id: str, store: RanchStore = Depends(get_store)):
    """Completion stats for a browsing session"""
    return store.games.stats(session_id)


@router.get("/{game_id}", response_model=GameStateResponse)
async def get_game(game_id: str, store: RanchStore = Depends(get_store)):
    """Current score, timer and status"""
    return _state(_get_game(game_id, store), store)


@router.post("/{game_id}/points", response_model=GameStateResponse)
async def apply_points(
    game_id: str,
    request: PointsRequest,
    store: RanchStore = Depends(get_store),
):
    """Apply a score delta; ignored once the game is no longer playing"""
    game = _get_game(game_id, store)
    if request.delta >= 0:
        game.session.add_points(request.delta)
    else:
        game.session.subtract_points(-request.delta)
    return _state(game, store)


@router.post("/{game_id}/end", response_model=GameStateResponse)
async def end_game(game_id: str, store: RanchStore = Depends(get_store)):
    """Finish the game now; safe to call after the timer already ended it"""
    game = _get_game(game_id, store)
    game.session.end()
    return _state(game, store)
