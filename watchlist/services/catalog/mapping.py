from __future__ import annotations

from typing import Any
from uuid import uuid4

from watchlist.services.catalog.types import CatalogItem, CountryAvailability


def _str_or_empty(v: Any) -> str:
    return v if isinstance(v, str) else ""


def derive_item_id(result: dict[str, Any]) -> str:
    """Pick a stable id for a search result, never returning an empty string.

    Order: netflix_id as string -> netflix_id as int -> generic `id` -> fresh uuid.
    """
    netflix_id = result.get("netflix_id")
    if isinstance(netflix_id, str) and netflix_id:
        return netflix_id
    # bool is an int subclass; a True/False id is garbage, not 1/0
    if isinstance(netflix_id, int) and not isinstance(netflix_id, bool):
        return str(netflix_id)

    fallback = result.get("id")
    if isinstance(fallback, str) and fallback:
        return fallback

    return uuid4().hex


def to_catalog_item(result: dict[str, Any]) -> CatalogItem:
    return CatalogItem(
        item_id=derive_item_id(result),
        title=_str_or_empty(result.get("title")),
        img=_str_or_empty(result.get("img")),
        synopsis=_str_or_empty(result.get("synopsis")),
        availability=None,
    )


def to_catalog_items(results: list[Any], *, limit: int) -> list[CatalogItem]:
    out: list[CatalogItem] = []
    for r in results[:limit]:
        if not isinstance(r, dict):
            continue
        out.append(to_catalog_item(r))
    return out


def to_country_availability(result: dict[str, Any]) -> CountryAvailability:
    return CountryAvailability(
        country_code=_str_or_empty(result.get("country_code")),
        country=_str_or_empty(result.get("country")),
        audio=_str_or_empty(result.get("audio")),
        subtitle=_str_or_empty(result.get("subtitle")),
    )


def to_country_availability_list(results: list[Any]) -> list[CountryAvailability]:
    return [to_country_availability(r) for r in results if isinstance(r, dict)]
