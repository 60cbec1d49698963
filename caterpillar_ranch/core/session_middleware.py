"""
Browsing Session Middleware

Resolves the X-Session-Id header into a BrowsingSession on every request.
Known ids are attached to request.state; unknown or missing ids attach
nothing. Routes that need a session depend on require_session, which
issues a fresh one on demand. The id is echoed back so the client can
keep sending it for the lifetime of the tab.
"""

import logging
from typing import Callable, Optional

from fastapi import Request, HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .session import BrowsingSession, SessionManager

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Id"


class BrowsingSessionMiddleware(BaseHTTPMiddleware):
    """Attach the caller's browsing session to request.state"""

    def __init__(self, app, manager_factory: Callable[[], SessionManager]):
        super().__init__(app)
        self.manager_factory = manager_factory

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        manager = self.manager_factory()
        requested_id = request.headers.get(SESSION_HEADER)

        session = manager.resume_session(requested_id) if requested_id else None
        if requested_id and not session:
            logger.debug(f"Unknown session {requested_id}")

        request.state.session_manager = manager
        request.state.browsing_session = session

        response = await call_next(request)

        # require_session may have issued one; the request may also have ended it
        session = getattr(request.state, "browsing_session", None)
        if session and not session.ended:
            response.headers[SESSION_HEADER] = session.session_id
        return response


class SessionDependency:
    """
    FastAPI dependency returning the request's browsing session.

    With required=True a request without a known session gets a new one;
    otherwise None is returned and no session is created.
    """

    def __init__(self, required: bool = True):
        self.required = required

    async def __call__(self, request: Request) -> Optional[BrowsingSession]:
        session = getattr(request.state, "browsing_session", None)
        if session is not None or not self.required:
            return session

        manager: Optional[SessionManager] = getattr(request.state, "session_manager", None)
        if manager is None:
            raise HTTPException(status_code=500, detail="Browsing sessions are not configured")

        session = manager.create_session()
        request.state.browsing_session = session
        return session


require_session = SessionDependency(required=True)
optional_session = SessionDependency(required=False)
