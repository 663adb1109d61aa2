from __future__ import annotations

import logging
from functools import lru_cache

import redis
from redis import Redis

from watchlist.core.config import settings

logger = logging.getLogger(__name__)


def connect_redis(url: str, *, timeout_secs: float = 2.0) -> Redis | None:
    """Open a client and ping it; None when the server can't be reached."""
    try:
        client: Redis = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=timeout_secs,
            socket_timeout=timeout_secs,
        )
        client.ping()
    except redis.RedisError as exc:
        logger.warning("Redis at %s unavailable: %s", url, exc)
        return None
    return client


@lru_cache
def get_redis() -> Redis | None:
    return connect_redis(settings.redis_url)
