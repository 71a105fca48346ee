"""Fragment extractors for the fundamentals site and the financial-data API."""

from .base import FragmentExtractor
from .fundamentus import DetailsExtractor, EventsExtractor, HoldersExtractor
from .yahoo import HistoryExtractor

__all__ = [
    "FragmentExtractor",
    "DetailsExtractor",
    "EventsExtractor",
    "HoldersExtractor",
    "HistoryExtractor",
]
