import logging
import threading
import time
from typing import Dict, Optional, Protocol, Tuple

import redis

from ..core.config import get_settings
from ..core.errors import TransientNetworkError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def setex(self, key: str, expires_in: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class RedisStore:
    """Redis-backed store. Connection failures surface as TransientNetworkError."""

    def __init__(self, client: Optional[redis.Redis] = None):
        if client is None:
            settings = get_settings()
            client = redis.Redis(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=0,
                decode_responses=True,
            )
        self.redis = client

    def _call(self, method: str, *args):
        try:
            return getattr(self.redis, method)(*args)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            logger.error("Redis %s failed: %s", method, e)
            raise TransientNetworkError("Preference store is unreachable") from e

    def get(self, key: str) -> Optional[str]:
        return self._call("get", key)

    def set(self, key: str, value: str) -> None:
        self._call("set", key, value)

    def setex(self, key: str, expires_in: int, value: str) -> None:
        self._call("setex", key, expires_in, value)

    def delete(self, key: str) -> None:
        self._call("delete", key)


class MemoryStore:
    """Process-local store for tests and single-node development."""

    def __init__(self):
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, deadline = entry
            if deadline is not None and time.monotonic() >= deadline:
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._prune(time.monotonic())
            self._data[key] = (value, None)

    def setex(self, key: str, expires_in: int, value: str) -> None:
        with self._lock:
            now = time.monotonic()
            self._prune(now)
            self._data[key] = (value, now + expires_in)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def _prune(self, now: float) -> None:
        # Caller holds the lock
        expired = [
            key for key, (_, deadline) in self._data.items()
            if deadline is not None and now >= deadline
        ]
        for key in expired:
            del self._data[key]


def build_store(backend: Optional[str] = None) -> KeyValueStore:
    backend = backend or get_settings().KV_BACKEND
    if backend == "redis":
        return RedisStore()
    if backend != "memory":
        logger.warning("Unknown KV_BACKEND %r, using the in-memory store", backend)
    return MemoryStore()


kv_store = build_store()


def get_kv_store() -> KeyValueStore:
    return kv_store


class TokenBlacklist:

    def __init__(self, store: KeyValueStore):
        self.store = store

    def add(self, token: str, expires_in: int) -> None:
        self.store.setex(f"blacklist:{token}", expires_in, "1")

    def contains(self, token: str) -> bool:
        return bool(self.store.get(f"blacklist:{token}"))
