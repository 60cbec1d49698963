# Core modules

from .config import settings, get_settings, Settings
from .errors import RanchError, ValidationError, NotFoundError, StorageScopeError, ReplayBlockedError
from .session import SessionManager, BrowsingSession

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "RanchError",
    "ValidationError",
    "NotFoundError",
    "StorageScopeError",
    "ReplayBlockedError",
    "SessionManager",
    "BrowsingSession",
]
