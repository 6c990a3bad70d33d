"""
Thread-safe rate-limited logging.

Decoding many messages with the same bad signature should not produce one
warning per message.
"""
import logging
import threading
from typing import Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

# At most one log line per key per interval; the cache TTL is the interval
DEFAULT_INTERVAL = 60

_log_caches = {}
_log_cache_lock = threading.RLock()


def _cache_for(interval: int) -> TTLCache:
    cache = _log_caches.get(interval)
    if cache is None:
        cache = TTLCache(maxsize=256, ttl=interval)
        _log_caches[interval] = cache
    return cache


def rate_limited_log(
    message: str,
    *args,
    level: str = "warning",
    interval: int = DEFAULT_INTERVAL,
    key: Optional[str] = None,
    logger_instance: Optional[logging.Logger] = None
) -> bool:
    """
    Log a message unless the same key was logged within ``interval`` seconds.

    Args:
        message: Message format string
        *args: Arguments for the format string
        level: Log level (debug, info, warning, error, critical)
        interval: Minimum interval between logs in seconds
        key: Deduplication key, defaults to level plus message format
        logger_instance: Logger to use (defaults to module logger)

    Returns:
        True if the message was logged, False if it was suppressed
    """
    log_instance = logger_instance or logger
    log_method = getattr(log_instance, level.lower(), log_instance.warning)
    cache_key = key or f"{level}:{message}"

    with _log_cache_lock:
        cache = _cache_for(interval)
        if cache_key in cache:
            return False
        cache[cache_key] = True

    log_method(message, *args)
    return True


def reset() -> None:
    """Forget all suppressed keys"""
    with _log_cache_lock:
        _log_caches.clear()
