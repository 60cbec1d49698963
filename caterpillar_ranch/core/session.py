"""Browsing session management"""

import uuid
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional
from dataclasses import dataclass, field

from .storage import InMemorySessionStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BrowsingSession:
    """
    One open tab/browser instance.

    A page reload re-sends the same session id and keeps the same store;
    closing the tab ends the session and wipes the store.
    """
    session_id: str
    created_at: datetime
    updated_at: datetime
    store: InMemorySessionStore = field(default_factory=InMemorySessionStore)
    ended: bool = False

    def touch(self, now: datetime) -> None:
        self.updated_at = now


class SessionManager:
    """Manages browsing sessions and their session-scoped stores"""

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self.sessions: dict[str, BrowsingSession] = {}
        self._clock = clock
        self._lock = threading.Lock()

    def create_session(self, session_id: Optional[str] = None) -> BrowsingSession:
        """Create a new session"""
        now = self._clock()
        session = BrowsingSession(
            session_id=session_id or str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self.sessions[session.session_id] = session
        logger.info(f"Browsing session started: {session.session_id}")
        return session

    def get_session(self, session_id: str) -> Optional[BrowsingSession]:
        """Get session by ID"""
        return self.sessions.get(session_id)

    def resume_session(self, session_id: str) -> Optional[BrowsingSession]:
        """Get a known session and mark it active; None when unknown"""
        session = self.sessions.get(session_id)
        if session:
            session.touch(self._clock())
        return session

    def get_or_create_session(self, session_id: Optional[str] = None) -> BrowsingSession:
        """Get existing session or create new one"""
        session = self.resume_session(session_id) if session_id else None
        return session or self.create_session()

    def end_session(self, session_id: str) -> bool:
        """End a session, discarding everything in its session-scoped store"""
        with self._lock:
            session = self.sessions.pop(session_id, None)
        if not session:
            return False
        session.store.clear()
        session.ended = True
        logger.info(f"Browsing session ended: {session_id}")
        return True

    def cleanup_old_sessions(self, max_age_hours: int = 24) -> int:
        """End sessions idle for longer than max_age_hours"""
        now = self._clock()
        old_sessions = [
            sid for sid, session in list(self.sessions.items())
            if (now - session.updated_at).total_seconds() > max_age_hours * 3600
        ]
        for sid in old_sessions:
            self.end_session(sid)
        return len(old_sessions)
