"""
Persistence scopes

Two scopes exist and must never be collapsed into one:

- DurableStore: survives restarts (carts, pending discount ledger)
- SessionStore: lives only as long as one browsing session (play-gate)

Components check the scope they are handed and raise StorageScopeError
when given the wrong one.
"""

import os
import json
import logging
import tempfile
import threading
from abc import ABC, abstractmethod
from copy import deepcopy
from typing import Any, Iterator, Optional
from urllib.parse import quote, unquote

from .errors import StorageScopeError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """JSON-compatible key/value storage"""

    scope: str = "abstract"

    @abstractmethod
    def get(self, key: str) -> Optional[Any]: ...

    @abstractmethod
    def put(self, key: str, value: Any) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> bool: ...

    @abstractmethod
    def keys(self) -> Iterator[str]: ...


class DurableStore(KeyValueStore):
    """Storage that survives restarts until explicitly cleared"""

    scope = "durable"


class SessionStore(KeyValueStore):
    """Storage scoped to one browsing session"""

    scope = "session"

    @abstractmethod
    def clear(self) -> None: ...


class _MemoryBackend:
    def __init__(self):
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            value = self._data.get(key)
            return deepcopy(value) if value is not None else None

    def put(self, key: str, value: Any) -> None:
        # Round-trip through JSON so in-memory and file stores accept the same values
        encoded = json.loads(json.dumps(value))
        with self._lock:
            self._data[key] = encoded

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._data))

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class InMemoryDurableStore(_MemoryBackend, DurableStore):
    """Durable scope kept in process memory (tests, single-process dev)"""
    pass


class InMemorySessionStore(_MemoryBackend, SessionStore):
    """Session scope owned by a BrowsingSession"""
    pass


class JsonFileDurableStore(DurableStore):
    """
    Durable scope backed by one JSON file per key.

    Writes go to a temp file that is flushed, fsynced and renamed over the
    target before put() returns, so a crash right after a cart mutation
    never loses the line.
    """

    SUFFIX = ".json"

    def __init__(self, directory: str):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)
        self._lock = threading.Lock()

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, quote(key, safe="") + self.SUFFIX)

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def put(self, key: str, value: Any) -> None:
        path = self._path(key)
        with self._lock:
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, path)
            except Exception:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise

    def delete(self, key: str) -> bool:
        path = self._path(key)
        with self._lock:
            if os.path.exists(path):
                os.unlink(path)
                return True
        return False

    def keys(self) -> Iterator[str]:
        names = sorted(os.listdir(self.directory))
        return iter([unquote(n[: -len(self.SUFFIX)]) for n in names if n.endswith(self.SUFFIX)])


def require_scope(store: KeyValueStore, expected: type, owner: str) -> None:
    """Reject a store whose persistence scope does not match what owner needs"""
    if not isinstance(store, expected):
        raise StorageScopeError(
            f"{owner} requires a {expected.scope} store, got {type(store).__name__} ({store.scope})"
        )


def build_durable_store(data_dir: Optional[str]) -> DurableStore:
    """Create the durable store configured for this process"""
    if data_dir:
        logger.info(f"Durable store: JSON files under {data_dir}")
        return JsonFileDurableStore(data_dir)
    logger.info("Durable store: in-memory")
    return InMemoryDurableStore()
