from __future__ import annotations

import json
import re
from pathlib import Path

from watchlist.services.call_budget import CallBudget
from watchlist.services.catalog.errors import EmptyResults, InvalidInput
from watchlist.services.catalog.mapping import (
    to_catalog_items,
    to_country_availability_list,
)
from watchlist.services.catalog.types import CatalogItem, CountryAvailability


def _norm(s: str) -> str:
    s = s.lower().strip()
    s = re.sub(r"[^a-z0-9\s]", " ", s)
    s = re.sub(r"\s+", " ", s)
    return s


class FixtureProvider:
    """Offline provider backed by a JSON file shaped like the uNoGS responses."""

    name = "fixture"

    def __init__(self, fixture_path: str, budget: CallBudget, *, limit: int = 5):
        self.fixture_path = fixture_path
        self.budget = budget
        self.limit = limit
        self._data = self._load()

    def _load(self) -> dict:
        p = Path(self.fixture_path)
        if not p.exists():
            raise FileNotFoundError(f"Fixture file not found: {p}")
        raw = p.read_text(encoding="utf-8")
        return json.loads(raw)

    @property
    def max_calls_per_day(self) -> int:
        return self.budget.max_calls_per_day

    def calls_made(self) -> int:
        return self.budget.count()

    async def search(self, title: str) -> list[CatalogItem]:
        self.budget.increment()

        q_title = _norm(title or "")
        if not q_title:
            raise InvalidInput("Search title is empty")

        matches = [
            it
            for it in self._data.get("results", [])
            if isinstance(it, dict) and q_title in _norm(str(it.get("title") or ""))
        ]
        if not matches:
            raise EmptyResults()
        return to_catalog_items(matches, limit=self.limit)

    async def fetch_availability(self, item_id: str) -> list[CountryAvailability]:
        self.budget.increment()
        entries = self._data.get("availability", {}).get(item_id, [])
        if not isinstance(entries, list):
            return []
        return to_country_availability_list(entries)
