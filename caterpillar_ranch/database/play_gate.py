"""Session play-gate"""

import logging

from ..core.storage import SessionStore, require_scope

logger = logging.getLogger(__name__)


class SessionPlayGate:
    """
    Products that already had a game started in this browsing session.

    Backed by the session-scoped store on purpose: the record disappears
    when the session ends, so a returning visitor gets a fresh roll while
    an immediate replay within one visit is blocked.
    """

    KEY = "played-games"

    def __init__(self, store: SessionStore):
        require_scope(store, SessionStore, "SessionPlayGate")
        self.store = store

    def played_products(self) -> set[str]:
        return set(self.store.get(self.KEY) or [])

    def has_played(self, product_id: str) -> bool:
        return product_id in self.played_products()

    def mark_played(self, product_id: str) -> None:
        played = self.played_products()
        if product_id in played:
            return
        played.add(product_id)
        self.store.put(self.KEY, sorted(played))
        logger.debug(f"Marked {product_id} as played this session")
