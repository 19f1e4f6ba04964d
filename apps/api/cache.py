import threading
import time
from typing import Any, Callable, Dict, Tuple

from packages.metrics import inc


_lock = threading.Lock()
_cache: Dict[str, Tuple[float, Any]] = {}


def get_or_set(key: str, ttl_seconds: int, compute: Callable[[], Any]) -> Any:
    now = time.time()
    with _lock:
        entry = _cache.get(key)
    if entry and entry[0] > now:
        inc("activity_cache_hits_total")
        return entry[1]
    inc("activity_cache_misses_total")
    # Computed outside the lock; compute() hits the network.
    value = compute()
    with _lock:
        _cache[key] = (time.time() + ttl_seconds, value)
    return value


def purge_expired() -> int:
    now = time.time()
    with _lock:
        stale = [key for key, (expires_at, _) in _cache.items() if expires_at <= now]
        for key in stale:
            del _cache[key]
    return len(stale)


def clear() -> None:
    with _lock:
        _cache.clear()
