from collections.abc import Callable
from threading import RLock
from time import monotonic
from typing import Generic
from typing import TypeVar


T = TypeVar("T")


class ResponseCache(Generic[T]):
    """In-memory cache that forgets entries after a fixed time-to-live.

    At most `max_entries` keys are held; once full, the oldest stored entry
    is evicted first.
    """

    def __init__(
        self,
        ttl_seconds: int,
        max_entries: int = 1024,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self.ttl_seconds = max(0, ttl_seconds)
        self.max_entries = max(1, max_entries)
        self._clock = clock
        # Insertion order is storage order, oldest first.
        self._entries: dict[str, tuple[float, T]] = {}
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _is_expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at >= self.ttl_seconds

    def get(self, key: str) -> T | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            stored_at, value = entry
            if self._is_expired(stored_at, self._clock()):
                del self._entries[key]
                return None

            return value

    def set(self, key: str, value: T) -> None:
        with self._lock:
            now = self._clock()
            self._entries.pop(key, None)

            # Oldest entries sit at the front, so expiry stops at the first
            # one still fresh.
            for stored_key, (stored_at, _) in list(self._entries.items()):
                if not self._is_expired(stored_at, now):
                    break
                del self._entries[stored_key]

            while len(self._entries) >= self.max_entries:
                del self._entries[next(iter(self._entries))]

            self._entries[key] = (now, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
