"""Browsing session routes"""

from fastapi import APIRouter, HTTPException, Depends

from ..core.session import BrowsingSession
from ..core.session_middleware import require_session
from ..database.play_gate import SessionPlayGate
from ..services.store import RanchStore
from .deps import get_store

router = APIRouter(prefix="/api/sessions", tags=["Sessions"])


def _describe(session: BrowsingSession) -> dict:
    return {
        "session_id": session.session_id,
        "created_at": session.created_at.isoformat(),
        "updated_at": session.updated_at.isoformat(),
        "played_products": sorted(SessionPlayGate(session.store).played_products()),
    }


@router.post("")
async def start_session(session: BrowsingSession = Depends(require_session)):
    """
    Return the caller's browsing session.

    The middleware issues a new one when no X-Session-Id header is sent.
    """
    return _describe(session)


@router.get("/{session_id}")
async def get_session(session_id: str, store: RanchStore = Depends(get_store)):
    """Get session details"""
    session = store.sessions.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return _describe(session)


@router.get("/{session_id}/played/{product_id}")
async def has_played(session_id: str, product_id: str, store: RanchStore = Depends(get_store)):
    """Whether the play-to-earn affordance should be hidden for a product"""
    session = store.sessions.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return {
        "session_id": session_id,
        "product_id": product_id,
        "has_played": SessionPlayGate(session.store).has_played(product_id),
    }


@router.delete("/{session_id}")
async def end_session(session_id: str, store: RanchStore = Depends(get_store)):
    """End a session (tab closed); its play record is discarded"""
    if store.sessions.end_session(session_id):
        return {"message": "Session ended"}
    raise HTTPException(status_code=404, detail="Session not found")
