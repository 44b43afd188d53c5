from __future__ import annotations

from .builder import CatalogBuilder
from .model import (
    Catalog,
    CatalogEntry,
    CatalogKey,
    Classification,
    Scenario,
    TAG_COMMON,
    TAG_EXTENDED,
    TAG_FAREDGE,
    TAG_PREFLIGHT,
    TAG_TELCO,
)

__all__ = [
    "Catalog",
    "CatalogBuilder",
    "CatalogEntry",
    "CatalogKey",
    "Classification",
    "Scenario",
    "TAG_COMMON",
    "TAG_EXTENDED",
    "TAG_FAREDGE",
    "TAG_PREFLIGHT",
    "TAG_TELCO",
]
