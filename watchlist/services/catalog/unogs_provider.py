from __future__ import annotations

import logging
from typing import Any

import httpx

from watchlist.core.config import Settings
from watchlist.services.call_budget import CallBudget
from watchlist.services.catalog.errors import (
    DecodeFailure,
    EmptyResults,
    InvalidInput,
    MissingCredentials,
    NetworkFailure,
)
from watchlist.services.catalog.mapping import (
    to_catalog_items,
    to_country_availability_list,
)
from watchlist.services.catalog.types import CatalogItem, CountryAvailability

logger = logging.getLogger(__name__)

SEARCH_PATH = "/search/titles"
COUNTRIES_PATH = "/title/countries"


def build_async_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.unogs_base_url,
        timeout=httpx.Timeout(settings.unogs_timeout_secs),
        follow_redirects=True,
        headers={
            "User-Agent": settings.user_agent,
            "Accept": "application/json",
        },
    )


class UnogsProvider:
    """uNoGS catalog client (RapidAPI).

    Every call is charged to the daily call budget before anything else runs.
    Search failures raise a `SearchError` subclass; availability failures are
    logged and collapse to an empty list.
    """

    name = "unogs"

    def __init__(
        self,
        settings: Settings,
        budget: CallBudget,
        *,
        client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self.budget = budget
        self._owns_client = client is None
        self._client = client or build_async_client(settings)

    async def __aenter__(self) -> UnogsProvider:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def max_calls_per_day(self) -> int:
        return self.budget.max_calls_per_day

    def calls_made(self) -> int:
        return self.budget.count()

    def remaining_calls(self) -> int:
        return self.budget.remaining()

    def _auth_headers(self) -> dict[str, str]:
        key = self.settings.unogs_api_key.strip()
        host = self.settings.unogs_api_host.strip()
        if not key or not host:
            raise MissingCredentials("API key or host not configured")
        return {"x-rapidapi-key": key, "x-rapidapi-host": host}

    def _build_request(self, path: str, params: dict[str, str]) -> httpx.Request:
        headers = self._auth_headers()
        try:
            return self._client.build_request("GET", path, params=params, headers=headers)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise InvalidInput(str(exc)) from exc

    async def _get_json(self, request: httpx.Request) -> Any:
        try:
            resp = await self._client.send(request)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NetworkFailure(f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise NetworkFailure(str(exc) or exc.__class__.__name__) from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise DecodeFailure(str(exc)) from exc

    async def search(self, title: str) -> list[CatalogItem]:
        # Charged up front: every call counts against the quota, whatever its outcome
        self.budget.increment()

        term = (title or "").strip()
        if not term:
            raise InvalidInput("Search title is empty")

        request = self._build_request(SEARCH_PATH, {"title": term})
        payload = await self._get_json(request)

        if not isinstance(payload, dict):
            raise DecodeFailure("Expected a JSON object")

        results = payload.get("results")
        if not isinstance(results, list):
            raise EmptyResults()

        items = to_catalog_items(results, limit=self.settings.search_result_limit)
        logger.debug("Search %r returned %s of %s results", term, len(items), len(results))
        return items

    async def fetch_availability(self, item_id: str) -> list[CountryAvailability]:
        self.budget.increment()

        try:
            request = self._build_request(COUNTRIES_PATH, {"netflix_id": item_id})
            payload = await self._get_json(request)
        except (MissingCredentials, InvalidInput, NetworkFailure, DecodeFailure) as exc:
            logger.warning("Availability lookup failed for %s: %s", item_id, exc.message)
            return []

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            logger.warning("Availability lookup for %s returned no results array", item_id)
            return []

        return to_country_availability_list(results)
