import logging
from contextlib import contextmanager
from typing import Generator, Optional

import redis

logger = logging.getLogger(__name__)


@contextmanager
def watch_lock(
    redis_client: Optional[redis.Redis], watch_id: str, timeout: int = 30
) -> Generator[bool, None, None]:
    """
    Serialize reconciliation of a single watch across concurrent deliveries.

    Yields whether the lock was acquired. Without a Redis client no lock is
    taken and True is yielded.

    Args:
        redis_client: Redis client, or None when locking is disabled.
        watch_id: The ID of the watch to lock.
        timeout: Maximum time to wait for the lock in seconds.
    """
    if redis_client is None:
        yield True
        return

    lock = redis_client.lock(
        f"lock:watch:{watch_id}", timeout=timeout * 2, blocking_timeout=timeout
    )

    acquired = False
    try:
        acquired = lock.acquire()
        if not acquired:
            logger.warning(
                f"Could not acquire lock for watch {watch_id} after {timeout}s"
            )
        yield acquired
    finally:
        if acquired:
            try:
                lock.release()
            except redis.exceptions.LockError:
                logger.warning(
                    f"Could not release lock for watch {watch_id} (maybe expired)"
                )
