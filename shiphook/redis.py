"""Redis connection used for per-watch locks."""

from typing import Dict, Optional

import redis

from shiphook.config import Settings

_clients: Dict[str, redis.Redis] = {}


def get_redis(settings: Settings) -> Optional[redis.Redis]:
    """
    Shared client for ``settings.REDIS_URL``, or None when Redis is not
    configured and watch locking is disabled.
    """
    url = settings.REDIS_URL
    if not url:
        return None
    client = _clients.get(url)
    if client is None:
        # Each command is bounded by the lock timeout
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=settings.WATCH_LOCK_TIMEOUT,
            socket_connect_timeout=settings.WATCH_LOCK_TIMEOUT,
        )
        _clients[url] = client
    return client


__all__ = ["get_redis"]
