"""
Bounded memoization with least-recently-used eviction.

Pure functions that are called repeatedly with the same logical input
(tag parsing, date sorting, neighbor lookup) go through ``memoize``,
which stores results in a shared ``MemoCache``.

The cache has no automatic invalidation beyond capacity eviction.
Callers must call ``clear_memo_cache()`` whenever the underlying posts
change, because keys describe *which* posts were passed (their ids),
not their contents.
"""

import functools
import logging
import threading
from collections import OrderedDict
from collections.abc import Hashable, Mapping
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 500

# Key for any collection argument that is not a mapping; never equal to an id tuple
INVALID_COLLECTION_KEY = None


class MemoCache:
    """
    LRU cache mapping hashable keys to computed results.

    Backed by an OrderedDict whose order is recency of access: the first
    entry is the least recently used. ``get`` and ``put`` are O(1).

    A lock guards the ordering, so one cache can be shared across threads.
    Computation in ``get_or_compute`` runs outside the lock: memoized
    functions may call other memoized functions without deadlocking, and
    two threads racing on one key may both compute it (last write wins).
    """

    def __init__(self, maxsize: int = DEFAULT_CACHE_SIZE):
        if maxsize < 1:
            raise ValueError(f"maxsize must be at least 1, got {maxsize}")
        self._maxsize = maxsize
        self._data: OrderedDict[Hashable, Any] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._data

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the cached value for key, marking it most recently used."""
        with self._lock:
            if key not in self._data:
                return default
            self._data.move_to_end(key)
            return self._data[key]

    def put(self, key: Hashable, value: Any) -> None:
        """Store value under key, evicting the LRU entry when full."""
        with self._lock:
            self._put_locked(key, value)

    def _put_locked(self, key: Hashable, value: Any) -> None:
        if key in self._data:
            self._data.move_to_end(key)
            self._data[key] = value
            return
        # Evict before inserting so the cache never exceeds maxsize
        while len(self._data) >= self._maxsize:
            evicted, _ = self._data.popitem(last=False)
            logger.debug("Memo cache evicted %r", evicted)
        self._data[key] = value

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Return the cached value for key, computing and storing it on a miss."""
        with self._lock:
            if key in self._data:
                self._data.move_to_end(key)
                self.hits += 1
                return self._data[key]
            self.misses += 1
        value = compute()
        with self._lock:
            self._put_locked(key, value)
        return value

    def keys(self) -> list:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._data.keys())

    def resize(self, maxsize: int) -> None:
        """Change capacity, dropping least recently used entries if needed."""
        if maxsize < 1:
            raise ValueError(f"maxsize must be at least 1, got {maxsize}")
        with self._lock:
            self._maxsize = maxsize
            while len(self._data) > maxsize:
                self._data.popitem(last=False)

    def clear(self) -> None:
        """Drop every entry and reset hit/miss counters."""
        with self._lock:
            self._data.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> dict:
        return {
            "size": len(self._data),
            "maxsize": self._maxsize,
            "hits": self.hits,
            "misses": self.misses,
        }


# Process-wide cache shared by every memoized engine function
default_cache = MemoCache()


def clear_memo_cache() -> None:
    """Clear the shared cache. Call whenever the post data changes."""
    default_cache.clear()


def freeze(value: Any) -> Hashable:
    """Turn an argument into a hashable, structural cache-key component.

    Lists and tuples become tagged tuples, mappings become sorted item
    tuples, sets become frozensets. Anything else unhashable falls back
    to its repr.
    """
    if isinstance(value, (list, tuple)):
        return ("seq", tuple(freeze(v) for v in value))
    if isinstance(value, Mapping):
        try:
            items = sorted(value.items(), key=lambda kv: repr(kv[0]))
        except TypeError:
            return ("repr", repr(value))
        return ("map", tuple((freeze(k), freeze(v)) for k, v in items))
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(v) for v in value)
    if value is None or isinstance(value, (str, int, float, bool, bytes)):
        return (type(value).__name__, value)
    return ("repr", repr(value))


def collection_key(collection: Any) -> Optional[tuple]:
    """Order-independent key for a post collection: its sorted ids.

    Two collections with the same ids in a different iteration order
    produce the same key. Ids are kept as separate tuple elements, so no
    id can collide with a combination of others.
    """
    if not isinstance(collection, Mapping):
        return INVALID_COLLECTION_KEY
    return tuple(sorted(collection.keys(), key=lambda k: (type(k).__name__, str(k))))


def memoize(key_func: Callable[..., Hashable], cache: Optional[MemoCache] = None):
    """Decorator memoizing a pure function in a MemoCache.

    Args:
        key_func: Called with the same arguments as the function; returns
            the hashable part of the key identifying the logical input.
        cache: Cache to use. Defaults to the shared ``default_cache``,
            looked up at call time so tests can clear it.

    The decorated function exposes the original as ``__wrapped__``.
    """
    def decorator(func):
        namespace = f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            target = cache if cache is not None else default_cache
            key = (namespace, key_func(*args, **kwargs))
            return target.get_or_compute(key, lambda: func(*args, **kwargs))

        return wrapper

    return decorator
