"""Library item sources and records."""
from .catalog_source import CatalogItemSource
from .fs_source import DirectoryItemSource
from .models import Item, LightItem, serialize_item
from .source import BaseItemSource, ItemSource

__all__ = [
    "BaseItemSource",
    "CatalogItemSource",
    "DirectoryItemSource",
    "Item",
    "ItemSource",
    "LightItem",
    "serialize_item",
]
