# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Process-wide cache of the provider's model list.

A single slot (list + fetch time) guarded by a readers/writer lock: any
number of request threads may read together, a refresh waits for them and
then has the slot to itself.  The provider is never called while the lock
is held.  The clock is injectable so staleness can be driven from tests.
"""

import threading
import time
from contextlib import contextmanager
from typing import Callable, List, Optional

# Seconds a fetched model list is served before it is considered stale
MODEL_CACHE_TTL = 600.0


class ReadWriteLock:
    """Many readers or one writer.  Waiting writers block new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ModelCache:
    def __init__(self, ttl: float = MODEL_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._lock = ReadWriteLock()
        self._models: Optional[List[dict]] = None
        self._fetched_at = 0.0

    def get(self) -> Optional[List[dict]]:
        """The cached list, or None when empty or older than the TTL."""
        with self._lock.read():
            if self._models is not None and self._clock() - self._fetched_at < self.ttl:
                return self._models
        return None

    def put(self, models: List[dict]) -> None:
        """Replace (never merge) the cached list and restart the TTL."""
        with self._lock.write():
            self._models = list(models)
            self._fetched_at = self._clock()

    def get_or_refresh(self, fetch: Callable[[], List[dict]]) -> List[dict]:
        cached = self.get()
        if cached is not None:
            return cached
        models = fetch()
        self.put(models)
        return models

    def clear(self) -> None:
        with self._lock.write():
            self._models = None
            self._fetched_at = 0.0


# Shared by every request of the process
model_cache = ModelCache()


def get_model_cache() -> ModelCache:
    """FastAPI dependency."""
    return model_cache
