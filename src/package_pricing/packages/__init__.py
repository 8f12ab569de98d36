"""Package records and catalog lookups."""

from .catalog import (
    HttpPackageCatalog,
    InMemoryPackageCatalog,
    JsonPackageCatalog,
    PackageCatalog,
    open_catalog,
)
from .models import (
    ON_REQUEST,
    GroupSizeTier,
    OnRequest,
    Package,
    PackageStatus,
    PeriodEntry,
    PeriodType,
    PricePoint,
    parse_price,
)

__all__ = [
    "ON_REQUEST",
    "GroupSizeTier",
    "HttpPackageCatalog",
    "InMemoryPackageCatalog",
    "JsonPackageCatalog",
    "OnRequest",
    "Package",
    "PackageCatalog",
    "PackageStatus",
    "PeriodEntry",
    "PeriodType",
    "PricePoint",
    "open_catalog",
    "parse_price",
]
