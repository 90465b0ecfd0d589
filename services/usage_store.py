import logging
import threading
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, Optional

logger = logging.getLogger(__name__)

KEY_PREFIX = "usage"
# Keys outlive their calendar day a little so late requests near midnight still count
REDIS_KEY_TTL_SECONDS = 2 * 24 * 60 * 60


def usage_key(identity: str, day: date) -> str:
    """Key for one caller's usage on one calendar day."""
    return f"{KEY_PREFIX}:{identity or 'unknown'}:{day.isoformat()}"


class UsageStore(ABC):
    """Counter store behind the daily usage gate."""

    @abstractmethod
    def increment(self, key: str) -> int:
        """Atomically add one to ``key`` and return the new count."""
        pass

    @abstractmethod
    def get(self, key: str) -> int:
        """Current count for ``key``, 0 when unseen."""
        pass

    @abstractmethod
    def reset(self, key: Optional[str] = None) -> None:
        """Forget ``key``, or every usage key when None."""
        pass


class InMemoryUsageStore(UsageStore):
    """
    Process-local counters.

    Counts live only in this process: they are lost on restart and are not
    shared between workers. Nothing is ever evicted.
    """

    def __init__(self):
        self._counts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def increment(self, key: str) -> int:
        with self._lock:
            self._counts[key] = self._counts.get(key, 0) + 1
            return self._counts[key]

    def get(self, key: str) -> int:
        with self._lock:
            return self._counts.get(key, 0)

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._counts.clear()
            else:
                self._counts.pop(key, None)


class RedisUsageStore(UsageStore):
    """Counters kept in Redis with INCR, shared by every worker."""

    def __init__(self, client, ttl_seconds: int = REDIS_KEY_TTL_SECONDS):
        self.client = client
        self.ttl_seconds = ttl_seconds

    def increment(self, key: str) -> int:
        pipe = self.client.pipeline()
        pipe.incr(key)
        pipe.expire(key, self.ttl_seconds)
        count, _ = pipe.execute()
        return int(count)

    def get(self, key: str) -> int:
        value = self.client.get(key)
        return int(value) if value else 0

    def reset(self, key: Optional[str] = None) -> None:
        if key is not None:
            self.client.delete(key)
            return
        for stale in self.client.scan_iter(match=f"{KEY_PREFIX}:*"):
            self.client.delete(stale)


def create_usage_store(backend: str, redis_client=None) -> UsageStore:
    """
    Pick the usage store for the configured backend.

    Falls back to memory when Redis was requested but is not connected.
    """
    if (backend or "memory").lower() == "redis":
        if redis_client is not None and redis_client.client is not None:
            logger.info("Usage store: Redis")
            return RedisUsageStore(redis_client.client)
        logger.warning(
            "USAGE_STORE=redis but Redis is not connected; using in-memory counters"
        )
    logger.info("Usage store: in-memory (per process, reset on restart)")
    return InMemoryUsageStore()
