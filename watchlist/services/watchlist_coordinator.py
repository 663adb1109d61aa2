from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from watchlist.crud.watchlist import WatchlistStore
from watchlist.models.saved_item import SavedCatalogItem
from watchlist.services.catalog.errors import (
    DecodeFailure,
    EmptyResults,
    InvalidInput,
    MissingCredentials,
    NetworkFailure,
    SearchError,
)
from watchlist.services.catalog.provider import CatalogProvider
from watchlist.services.catalog.types import CatalogItem, CountryAvailability

logger = logging.getLogger(__name__)

Listener = Callable[["WatchlistCoordinator"], None]

ALREADY_SAVED_MESSAGE = "Already on watchlist"
ADDED_MESSAGE = "Added to watchlist"
REMOVED_MESSAGE = "Removed from watchlist"
SAVE_FAILED_MESSAGE = "Failed to save to watchlist"


def describe_search_error(exc: SearchError, *, title: str) -> str:
    """Fixed, user-facing text for each search failure kind."""
    if isinstance(exc, InvalidInput):
        return "Invalid URL"
    if isinstance(exc, MissingCredentials):
        return "Missing API credentials. Check API_KEY and API_HOST."
    if isinstance(exc, NetworkFailure):
        return f"Network error: {exc.message}"
    if isinstance(exc, EmptyResults):
        return f'No results found for "{title}".'
    if isinstance(exc, DecodeFailure):
        return f"Failed to process data: {exc.message}"
    return f"Search failed: {exc.message}"


class WatchlistCoordinator:
    """UI-facing state for search, detail and watchlist screens.

    All state is owned by the event loop the coroutines run on; nothing here is
    thread-safe. The pending set is updated before the first await in
    `save_to_watchlist`, which is what keeps two overlapping saves of the same
    id from both reaching the store.
    """

    def __init__(self, provider: CatalogProvider, store: WatchlistStore):
        self.provider = provider
        self.store = store

        self.api_call_count: int = 0
        self.search_results: list[CatalogItem] = []
        self.error_message: str | None = None
        self.selected_availability: list[CountryAvailability] = []
        self.saved_items: list[SavedCatalogItem] = []
        self.watchlist_message: str | None = None

        self._pending_item_ids: set[str] = set()
        self._listeners: list[Listener] = []

    @property
    def pending_item_ids(self) -> frozenset[str]:
        return frozenset(self._pending_item_ids)

    @property
    def api_limit(self) -> int:
        return self.provider.max_calls_per_day

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("watchlist state listener failed")

    def _refresh_call_count(self) -> None:
        self.api_call_count = self.provider.calls_made()

    def load(self) -> None:
        """Initial state: saved items and today's call count."""
        self.fetch_saved_items()
        self._refresh_call_count()
        self._publish()

    async def search_catalog(self, title: str) -> None:
        self.search_results = []
        self._publish()

        try:
            items = await self.provider.search(title)
        except SearchError as exc:
            # Previous results stay cleared; only the message changes
            self.error_message = describe_search_error(exc, title=title)
            logger.info("Search for %r failed: %s", title, exc.__class__.__name__)
        else:
            self.search_results = items
            self.error_message = None
        finally:
            self._refresh_call_count()
            self._publish()

    async def fetch_availability(self, item: CatalogItem) -> None:
        availability = await self.provider.fetch_availability(item.item_id)
        self.selected_availability = availability
        self._refresh_call_count()
        self._publish()

    async def save_to_watchlist(self, item: CatalogItem) -> bool:
        if self.is_item_saved(item):
            self.watchlist_message = ALREADY_SAVED_MESSAGE
            self._publish()
            return False

        # Must happen before the first await
        self._pending_item_ids.add(item.item_id)
        self._publish()

        try:
            logger.info("Fetching country availability before saving %s", item.title)
            availability = await self.provider.fetch_availability(item.item_id)
            self._refresh_call_count()
            self.store.save_catalog_item(item, availability)
            self.fetch_saved_items()
        except SQLAlchemyError:
            logger.exception("Saving %s (%s) failed", item.title, item.item_id)
            self.watchlist_message = SAVE_FAILED_MESSAGE
            return False
        else:
            self.watchlist_message = ADDED_MESSAGE
            return True
        finally:
            self._pending_item_ids.discard(item.item_id)
            self._publish()

    def fetch_saved_items(self) -> None:
        self.saved_items = self.store.fetch_saved_items()
        saved_ids = {s.item_id for s in self.saved_items}
        self._pending_item_ids -= saved_ids
        logger.debug("Loaded %s saved items", len(self.saved_items))
        self._publish()

    def remove_from_watchlist(self, item: CatalogItem) -> None:
        self.store.delete_saved_item(item.item_id)
        self.fetch_saved_items()
        self._pending_item_ids.discard(item.item_id)
        self.watchlist_message = REMOVED_MESSAGE
        self._publish()

    def is_item_saved(self, item: CatalogItem) -> bool:
        if item.item_id in self._pending_item_ids:
            return True
        return any(s.item_id == item.item_id for s in self.saved_items)
