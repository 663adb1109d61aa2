from __future__ import annotations

import json
import logging
from typing import Any, Protocol, cast

from redis import Redis

from watchlist.core.config import settings
from watchlist.core.redis_client import get_redis
from watchlist.crud.app_settings import SqlKeyValueStore
from watchlist.db import session as db_session

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def incr(self, key: str) -> int: ...


def _as_int(value: Any) -> int:
    try:
        return int(value) if value is not None else 0
    except (TypeError, ValueError):
        return 0


class MemoryKeyValueStore:
    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def incr(self, key: str) -> int:
        new_value = _as_int(self._data.get(key)) + 1
        self._data[key] = new_value
        return new_value


class RedisKeyValueStore:
    """JSON-encoded values under a key prefix; no expiry.

    Integers JSON-encode to plain digits, so counters can use INCR directly.
    """

    def __init__(self, client: Redis, *, prefix: str = "watchlist:settings"):
        self._client = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def get(self, key: str) -> Any | None:
        raw = cast(str | None, self._client.get(self._key(key)))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring undecodable setting %s", key)
            return None

    def set(self, key: str, value: Any) -> None:
        self._client.set(self._key(key), json.dumps(value))

    def incr(self, key: str) -> int:
        return cast(int, self._client.incr(self._key(key)))


def get_settings_store() -> KeyValueStore:
    backend = settings.settings_backend
    if backend == "memory":
        return MemoryKeyValueStore()
    if backend == "redis":
        r = get_redis()
        if r is not None:
            return RedisKeyValueStore(r)
    # create_all is idempotent; a fresh database has no app_settings table yet
    db_session.init_db()
    return SqlKeyValueStore(db_session.SessionLocal)
