from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from watchlist.models.base import Base
from watchlist.services.catalog.types import CatalogItem, CountryAvailability


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SavedCatalogItem(Base):
    __tablename__ = "saved_catalog_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    # Provider id (netflix_id or the derived fallback)
    item_id: Mapped[str] = mapped_column(String(120), nullable=False)

    title: Mapped[str] = mapped_column(String(600), nullable=False, default="")
    img: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    country_availability: Mapped[list["SavedCountryAvailability"]] = relationship(
        back_populates="saved_item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SavedCountryAvailability.country",
    )

    __table_args__ = (UniqueConstraint("item_id", name="uq_saved_catalog_items_item_id"),)

    def to_catalog_item(self) -> CatalogItem:
        """Rebuild a transient item so a saved entry can open the detail view."""
        return CatalogItem(
            item_id=self.item_id,
            title=self.title or "",
            img=self.img or "",
            synopsis="",
            availability=[c.to_country_availability() for c in self.country_availability],
        )


class SavedCountryAvailability(Base):
    __tablename__ = "saved_country_availability"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    saved_item_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("saved_catalog_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    country_code: Mapped[str] = mapped_column(String(8), nullable=False, default="")
    country: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    audio: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    subtitle: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    saved_item: Mapped[SavedCatalogItem] = relationship(back_populates="country_availability")

    def to_country_availability(self) -> CountryAvailability:
        return CountryAvailability(
            country_code=self.country_code,
            country=self.country,
            audio=self.audio,
            subtitle=self.subtitle,
        )
