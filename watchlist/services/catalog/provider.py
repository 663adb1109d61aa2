from __future__ import annotations

from typing import Protocol

from watchlist.services.catalog.types import CatalogItem, CountryAvailability


class CatalogProvider(Protocol):
    name: str

    @property
    def max_calls_per_day(self) -> int: ...

    def calls_made(self) -> int: ...

    async def search(self, title: str) -> list[CatalogItem]: ...

    async def fetch_availability(self, item_id: str) -> list[CountryAvailability]: ...
