from __future__ import annotations

from functools import lru_cache

from watchlist.core.config import settings
from watchlist.services.call_budget import CallBudget
from watchlist.services.catalog.fixture_provider import FixtureProvider
from watchlist.services.catalog.provider import CatalogProvider
from watchlist.services.catalog.unogs_provider import UnogsProvider
from watchlist.services.settings_store import get_settings_store


@lru_cache
def get_call_budget() -> CallBudget:
    return CallBudget(get_settings_store(), max_calls_per_day=settings.max_api_calls_per_day)


@lru_cache
def get_provider() -> CatalogProvider:
    if settings.catalog_provider == "unogs":
        return UnogsProvider(settings, get_call_budget())
    if settings.catalog_provider == "fixture":
        return FixtureProvider(
            fixture_path=settings.fixture_catalog_path,
            budget=get_call_budget(),
            limit=settings.search_result_limit,
        )
    raise ValueError(f"Unknown catalog provider: {settings.catalog_provider}")
