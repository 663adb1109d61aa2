from __future__ import annotations

from pydantic import BaseModel, Field


class CountryAvailability(BaseModel):
    country_code: str = ""
    country: str = ""
    audio: str = ""
    subtitle: str = ""


class CatalogItem(BaseModel):
    item_id: str = Field(min_length=1)

    title: str = ""
    img: str = ""
    synopsis: str = ""

    # Only populated for items rebuilt from local storage
    availability: list[CountryAvailability] | None = None
