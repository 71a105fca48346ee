"""
Yahoo Finance History Extractor
===============================

Reads the quoteSummary API for ``SYMBOL.SA`` and derives:
- yearly earnings series (period: January 31st of the reporting year)
- yearly net margin series (net income / total revenue per statement)
- current debt-to-equity ratio
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from b3scraper.core.errors import TransportError
from b3scraper.models import HistorySeries, SeriesPoint
from b3scraper.sources.base import FragmentExtractor
from b3scraper.utils.cleaner import DataCleaner
from b3scraper.utils.logger import get_logger
from b3scraper.utils.yahoo_session import YahooSession

log = get_logger(__name__)

DEFAULT_BASE_URL = "https://query2.finance.yahoo.com"
DEFAULT_MARKET_SUFFIX = ".SA"
QUOTE_SUMMARY_MODULES = ("earnings", "incomeStatementHistory", "financialData")


def _raw(value: Any) -> Optional[float]:
    """Yahoo wraps numbers as {"raw": 1.0, "fmt": "1.00"}; empty dicts mean missing."""
    if isinstance(value, dict):
        value = value.get("raw")
    return DataCleaner.clean_decimal(value) if isinstance(value, (int, float)) else None


def _earnings_period(year: Any) -> Optional[datetime]:
    try:
        return datetime(int(year), 1, 31, tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return None


def _statement_period(end_date: Any) -> Optional[datetime]:
    seconds = _raw(end_date)
    if seconds is None:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def parse_quote_summary(result: Dict[str, Any]) -> HistorySeries:
    """Build the history fragment from one quoteSummary result object."""
    earnings_per_share: List[SeriesPoint] = []
    yearly = ((result.get("earnings") or {}).get("financialsChart") or {}).get("yearly") or []
    for item in yearly:
        period = _earnings_period(item.get("date"))
        if period is None:
            log.debug(f"Skipping earnings entry without year: {item}")
            continue
        earnings_per_share.append(SeriesPoint(period=period, value=_raw(item.get("earnings"))))

    net_margin: List[SeriesPoint] = []
    statements = (result.get("incomeStatementHistory") or {}).get("incomeStatementHistory") or []
    for statement in statements:
        period = _statement_period(statement.get("endDate"))
        if period is None:
            log.debug("Skipping income statement without end date")
            continue
        value = DataCleaner.ratio(_raw(statement.get("netIncome")), _raw(statement.get("totalRevenue")))
        net_margin.append(SeriesPoint(period=period, value=value))

    return HistorySeries(
        debt_by_annual_equity=_raw((result.get("financialData") or {}).get("debtToEquity")),
        earnings_per_share=tuple(earnings_per_share),
        net_margin=tuple(net_margin),
    )


class HistoryExtractor(FragmentExtractor):
    fragment = "history"

    def __init__(
        self,
        fetcher,
        session: Optional[YahooSession] = None,
        base_url: Optional[str] = None,
        market_suffix: str = DEFAULT_MARKET_SUFFIX,
    ) -> None:
        super().__init__(fetcher)
        self.session = session
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.market_suffix = market_suffix

    def ticker(self, symbol: str) -> str:
        return f"{symbol}{self.market_suffix}"

    async def _query(self, symbol: str) -> Dict[str, Any]:
        params = {"modules": ",".join(QUOTE_SUMMARY_MODULES)}
        kwargs: Dict[str, Any] = {}
        if self.session is not None:
            await self.session.refresh_if_needed()
            params = self.session.get_api_params(params)
            headers = self.session.get_headers()
            cookies = self.session.get_cookies()
            # Sent per request; the shared client jar would leak them to other hosts
            if cookies:
                headers["Cookie"] = "; ".join(f"{name}={value}" for name, value in cookies.items())
            kwargs["headers"] = headers

        url = f"{self.base_url}/v10/finance/quoteSummary/{self.ticker(symbol)}"
        return await self.fetcher.fetch_json(url, params=params, **kwargs)

    async def fetch(self, symbol: str) -> HistorySeries:
        try:
            payload = await self._query(symbol)
        except TransportError as e:
            if e.status_code != 401 or self.session is None:
                raise
            log.warning("Yahoo rejected session for {}, refreshing crumb", symbol)
            await self.session.clear_crumb()
            payload = await self._query(symbol)

        if not isinstance(payload, dict):
            payload = {}
        summary = payload.get("quoteSummary") or {}
        results = summary.get("result") or []
        if not results:
            log.warning("No quoteSummary result for {}: {}", self.ticker(symbol), summary.get("error"))
            return HistorySeries()
        return parse_quote_summary(results[0])


__all__ = ["HistoryExtractor", "parse_quote_summary", "QUOTE_SUMMARY_MODULES"]
