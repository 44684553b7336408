from threading import RLock
from typing import Any
from typing import Callable
from typing import TypeVar


miss = object()

T = TypeVar("T")
F = Callable[[T], Any]


class LFUCache(dict):
    """Simple LFU cache for memoizing functions of a single hashable argument.

    When the cache is full, the least frequently used half of the entries is
    evicted.
    """

    def __init__(self, maxsize: int = 256) -> None:
        self.maxsize = maxsize
        self.lock = RLock()

    def get(self, key: T, f: F) -> Any:  # type: ignore[override]
        """Return the cached value for ``key``, computing it with ``f`` on a miss."""
        with self.lock:
            entry = super(LFUCache, self).get(key, miss)
            if entry is not miss:
                value, count = entry
                self[key] = (value, count + 1)
                return value

            if len(self) >= self.maxsize:
                for k in sorted(self, key=lambda k: self[k][1])[: self.maxsize >> 1]:
                    del self[k]

            value = f(key)
            self[key] = (value, 1)
            return value


def cached(maxsize: int = 256) -> Callable[[F], F]:
    """Decorator for memoizing functions of a single argument (LFU policy)."""

    def cached_wrapper(f: F) -> F:
        cache = LFUCache(maxsize)

        def cached_f(key: T) -> Any:
            return cache.get(key, f)

        cached_f.invalidate = cache.clear  # type: ignore[attr-defined]

        return cached_f

    return cached_wrapper
