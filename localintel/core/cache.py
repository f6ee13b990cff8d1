"""Process-wide TTL cache shared by the resolvers."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    expiry: float


class TTLCache:
    """Mutex-guarded key/value store whose entries expire after a TTL.

    A missing key and an expired key are indistinguishable to callers:
    ``is_expired`` is true for both and ``get`` returns ``None`` for both.
    Entries are never evicted except by ``sweep`` (run periodically by the
    background sweeper when it is started).
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sweeper: Optional[threading.Thread] = None
        self._stop = threading.Event()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or self._clock() >= entry.expiry:
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl: float = DEFAULT_TTL_SECONDS) -> None:
        entry = CacheEntry(key=key, value=value, expiry=self._clock() + ttl)
        with self._lock:
            self._entries[key] = entry

    def is_expired(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
        return entry is None or self._clock() >= entry.expiry

    def sweep(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now >= entry.expiry]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def start_sweeper(self, interval_seconds: float) -> None:
        if interval_seconds <= 0 or self._sweeper is not None:
            return
        self._stop.clear()

        def _run() -> None:
            while not self._stop.wait(interval_seconds):
                self.sweep()

        self._sweeper = threading.Thread(target=_run, name="ttl-cache-sweeper", daemon=True)
        self._sweeper.start()
        logger.info("Cache sweeper started (interval=%ss)", interval_seconds)

    def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._stop.set()
        self._sweeper.join(timeout=1)
        self._sweeper = None
