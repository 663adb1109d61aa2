from __future__ import annotations

import logging
from typing import Callable, Iterable, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from watchlist.models.saved_item import SavedCatalogItem, SavedCountryAvailability
from watchlist.services.catalog.types import CatalogItem, CountryAvailability

logger = logging.getLogger(__name__)


class WatchlistStore(Protocol):
    def fetch_saved_items(self) -> list[SavedCatalogItem]: ...

    def save_catalog_item(
        self, item: CatalogItem, availability: list[CountryAvailability]
    ) -> SavedCatalogItem: ...

    def delete_saved_item(self, item_id: str) -> bool: ...


def list_saved_items(db: Session) -> list[SavedCatalogItem]:
    """Return saved items, newest first, with their availability loaded."""
    stmt = (
        select(SavedCatalogItem)
        .options(selectinload(SavedCatalogItem.country_availability))
        .order_by(SavedCatalogItem.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())


def get_saved_item(db: Session, *, item_id: str) -> SavedCatalogItem | None:
    return db.execute(
        select(SavedCatalogItem)
        .options(selectinload(SavedCatalogItem.country_availability))
        .where(SavedCatalogItem.item_id == item_id)
    ).scalar_one_or_none()


def save_catalog_item(
    db: Session,
    *,
    item: CatalogItem,
    availability: Iterable[CountryAvailability],
) -> SavedCatalogItem:
    """Insert an item with its availability. An already-saved id is left as is."""
    existing = get_saved_item(db, item_id=item.item_id)
    if existing:
        return existing

    row = SavedCatalogItem(item_id=item.item_id, title=item.title, img=item.img)
    row.country_availability = [
        SavedCountryAvailability(
            country_code=a.country_code,
            country=a.country,
            audio=a.audio,
            subtitle=a.subtitle,
        )
        for a in availability
    ]
    db.add(row)
    return row


def delete_saved_item(db: Session, *, item_id: str) -> bool:
    existing = get_saved_item(db, item_id=item_id)
    if existing is None:
        return False
    db.delete(existing)
    return True


class SqlWatchlistStore:
    """Session-per-call store the coordinator talks to."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def fetch_saved_items(self) -> list[SavedCatalogItem]:
        with self._session_factory() as db:
            items = list_saved_items(db)
            # Detach so callers can read attributes after the session closes
            db.expunge_all()
            return items

    def save_catalog_item(
        self, item: CatalogItem, availability: list[CountryAvailability]
    ) -> SavedCatalogItem:
        with self._session_factory() as db:
            try:
                row = save_catalog_item(db, item=item, availability=availability)
                db.commit()
                db.refresh(row)
                # Load the relationship before detaching
                _ = list(row.country_availability)
                db.expunge(row)
            except Exception:
                db.rollback()
                raise
        logger.info("Saved %s (%s) with %s availability rows", item.title, item.item_id, len(availability))
        return row

    def delete_saved_item(self, item_id: str) -> bool:
        with self._session_factory() as db:
            try:
                removed = delete_saved_item(db, item_id=item_id)
                db.commit()
            except Exception:
                db.rollback()
                raise
        if removed:
            logger.info("Removed %s from watchlist", item_id)
        return removed
