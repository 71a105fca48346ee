"""
Fundamentus Scrapers - Details, Holders and Events
==================================================

Three HTML-backed extractors for fundamentus.com.br:
- DetailsExtractor: price, business description and P/E (detalhes.php)
- HoldersExtractor: shareholder structure (acionistas.php)
- EventsExtractor: earnings distributions of one category (proventos.php)

All page layout knowledge lives in the path constants below.
"""

from typing import List, Optional

from b3scraper.models import DetailsFragment, DividendEvent, HolderEntry
from b3scraper.sources.base import FragmentExtractor
from b3scraper.sources.locator import locate, locate_all, own_text, parse_document
from b3scraper.utils.cleaner import DataCleaner
from b3scraper.utils.logger import get_logger

log = get_logger(__name__)

DEFAULT_BASE_URL = "https://fundamentus.com.br"

# detalhes.php
PRICE_PATH = "div.center > div.conteudo > table:nth-child(2) tr:nth-child(1) > td.data.destaque.w3 > span"
BUSINESS_PATH = "div.center > div.conteudo > table:nth-child(2) tr:nth-child(5) > td:nth-child(2)"
PRICE_TO_EARNINGS_PATH = "div.center > div.conteudo > table:nth-child(4) tr:nth-child(2) > td:nth-child(4) > span"

# acionistas.php
HOLDER_ITEMS_PATH = ".my-menu li ul li a"
HOLDER_ORDINARY_PATH = "table td:nth-child(1)"
HOLDER_PREFERRED_PATH = "table td:nth-child(2)"
HOLDER_TOTAL_PATH = "table td:nth-child(3)"

# proventos.php
EVENT_ROWS_PATH = "#resultado tr"
EVENT_DATE_PATH = "td:nth-child(1)"
EVENT_AMOUNT_PATH = "td:nth-child(2)"
EVENT_TYPE_PATH = "td:nth-child(3)"

# proventos.php?tipo=2 lists cash distributions (dividends and interest on equity)
DEFAULT_EVENTS_CATEGORY = 2


class FundamentusExtractor(FragmentExtractor):
    """Base for the fundamentus.com.br pages, all keyed by ``papel``"""

    page = ""

    def __init__(self, fetcher, base_url: Optional[str] = None) -> None:
        super().__init__(fetcher)
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")

    def _params(self, symbol: str) -> dict:
        return {"papel": symbol}

    async def _fetch_document(self, symbol: str):
        url = f"{self.base_url}/{self.page}"
        log.debug("Fetching {} for {}", self.page, symbol)
        html = await self.fetcher.fetch_html(url, params=self._params(symbol), referer=self.base_url)
        return parse_document(html)


class DetailsExtractor(FundamentusExtractor):
    fragment = "details"
    page = "detalhes.php"

    async def fetch(self, symbol: str) -> DetailsFragment:
        soup = await self._fetch_document(symbol)
        return DetailsFragment(
            price=DataCleaner.clean_decimal(locate(soup, PRICE_PATH)),
            business=locate(soup, BUSINESS_PATH).strip(),
            price_to_earnings=DataCleaner.clean_decimal(locate(soup, PRICE_TO_EARNINGS_PATH)),
        )


class HoldersExtractor(FundamentusExtractor):
    fragment = "holders"
    page = "acionistas.php"

    async def fetch(self, symbol: str) -> List[HolderEntry]:
        soup = await self._fetch_document(symbol)
        holders = []
        for item in locate_all(soup, HOLDER_ITEMS_PATH):
            holders.append(
                HolderEntry(
                    name=own_text(item).strip(),
                    ordinary_shares=DataCleaner.clean_percentage(locate(item, HOLDER_ORDINARY_PATH)),
                    preferred_shares=DataCleaner.clean_percentage(locate(item, HOLDER_PREFERRED_PATH)),
                    total_shares=DataCleaner.clean_percentage(locate(item, HOLDER_TOTAL_PATH)),
                )
            )
        return holders


class EventsExtractor(FundamentusExtractor):
    fragment = "events"
    page = "proventos.php"

    def __init__(self, fetcher, base_url: Optional[str] = None, category: int = DEFAULT_EVENTS_CATEGORY) -> None:
        super().__init__(fetcher, base_url)
        self.category = category

    def _params(self, symbol: str) -> dict:
        return {"papel": symbol, "tipo": self.category}

    async def fetch(self, symbol: str) -> List[DividendEvent]:
        soup = await self._fetch_document(symbol)
        events = []
        # Source table order is kept as-is (most recent first on the page)
        for row in locate_all(soup, EVENT_ROWS_PATH):
            if row.find("td") is None:
                continue
            events.append(
                DividendEvent(
                    date=DataCleaner.clean_date(locate(row, EVENT_DATE_PATH)),
                    amount=DataCleaner.clean_decimal(locate(row, EVENT_AMOUNT_PATH)),
                    type=locate(row, EVENT_TYPE_PATH).strip(),
                )
            )
        return events


__all__ = [
    "DetailsExtractor",
    "HoldersExtractor",
    "EventsExtractor",
    "DEFAULT_BASE_URL",
    "DEFAULT_EVENTS_CATEGORY",
]
