from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable

from watchlist.services.settings_store import KeyValueStore

logger = logging.getLogger(__name__)

CALL_COUNT_KEY = "unogs_api_call_count"
LAST_RESET_KEY = "unogs_last_reset_date"


class CallBudget:
    """Daily counter of outbound catalog API calls.

    The counter lives in a durable key-value store and is zeroed the first time
    it is touched on a new calendar day. Calls are charged when issued, not when
    they succeed.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        max_calls_per_day: int = 50,
        now: Callable[[], datetime] = datetime.now,
    ):
        self._store = store
        self._now = now
        self.max_calls_per_day = max_calls_per_day
        self.reset_if_new_day()

    def _last_reset_date(self) -> date | None:
        raw = self._store.get(LAST_RESET_KEY)
        if not isinstance(raw, str):
            return None
        try:
            return datetime.fromisoformat(raw).date()
        except ValueError:
            logger.warning("Unparseable last reset date %r; treating as never reset", raw)
            return None

    def reset_if_new_day(self) -> bool:
        """Zero the counter unless it was already reset today. Returns True on reset."""
        now = self._now()
        if self._last_reset_date() == now.date():
            return False
        self._store.set(CALL_COUNT_KEY, 0)
        self._store.set(LAST_RESET_KEY, now.isoformat())
        logger.info("API call budget reset for %s", now.date().isoformat())
        return True

    def _raw_count(self) -> int:
        raw = self._store.get(CALL_COUNT_KEY)
        try:
            return int(raw) if raw is not None else 0
        except (TypeError, ValueError):
            return 0

    def count(self) -> int:
        self.reset_if_new_day()
        return self._raw_count()

    def increment(self) -> int:
        self.reset_if_new_day()
        new_count = self._store.incr(CALL_COUNT_KEY)
        if new_count > self.max_calls_per_day:
            logger.warning(
                "API call budget exceeded: %s of %s calls used today",
                new_count,
                self.max_calls_per_day,
            )
        return new_count

    def remaining(self) -> int:
        return max(0, self.max_calls_per_day - self.count())

    @property
    def exhausted(self) -> bool:
        return self.remaining() == 0
