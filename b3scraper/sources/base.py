"""Common contract of the per-symbol fragment extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from b3scraper.core.fetcher import Fetcher


class FragmentExtractor(ABC):
    """Fetches one remote resource for a symbol and returns one fragment.

    Implementations raise ``TransportError`` when the source cannot be
    reached; fields that cannot be read come back as missing values.
    """

    fragment = "fragment"

    def __init__(self, fetcher: Fetcher) -> None:
        self.fetcher = fetcher

    @abstractmethod
    async def fetch(self, symbol: str) -> Any:
        raise NotImplementedError


__all__ = ["FragmentExtractor"]
