"""Model exports for b3scraper."""

from .stock import (
    CurrentState,
    DetailsFragment,
    DividendEvent,
    HistorySeries,
    HolderEntry,
    SeriesPoint,
    StockRecord,
    to_epoch_ms,
)

__all__ = [
    "CurrentState",
    "DetailsFragment",
    "DividendEvent",
    "HistorySeries",
    "HolderEntry",
    "SeriesPoint",
    "StockRecord",
    "to_epoch_ms",
]
