"""Quote-to-package price synchronisation."""

from .controller import PriceSyncController
from .state import (
    CustomReason,
    LinkedPackageInfo,
    PriceChangeReason,
    PriceHistoryEntry,
    QuoteParameters,
    SyncError,
    SyncSnapshot,
    SyncState,
    SyncStatus,
)

__all__ = [
    "CustomReason",
    "LinkedPackageInfo",
    "PriceChangeReason",
    "PriceHistoryEntry",
    "PriceSyncController",
    "QuoteParameters",
    "SyncError",
    "SyncSnapshot",
    "SyncState",
    "SyncStatus",
]
