from watchlist.models.app_setting import AppSetting
from watchlist.models.base import Base
from watchlist.models.saved_item import SavedCatalogItem, SavedCountryAvailability


__all__ = [
    "Base",
    "AppSetting",
    "SavedCatalogItem",
    "SavedCountryAvailability",
]
