"""
Scrape Pipeline - Per-Symbol Orchestration
==========================================

Drives universe -> extractors -> aggregator -> store one symbol at a time.
Fragment fetches run strictly in sequence; a failing symbol is logged and
the run moves on to the next one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from b3scraper.core.aggregator import combine
from b3scraper.core.errors import PresenceCheckFailed, ScraperError
from b3scraper.core.storage import RecordStore
from b3scraper.models import DetailsFragment
from b3scraper.sources.base import FragmentExtractor
from b3scraper.symbols.universe import SymbolUniverse
from b3scraper.utils.logger import get_logger

log = get_logger(__name__)


class SymbolState(str, Enum):
    START = "start"
    DETAILS_FETCHED = "details_fetched"
    PRESENCE_CHECKED = "presence_checked"
    FRAGMENTS_COLLECTED = "fragments_collected"
    AGGREGATED = "aggregated"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass
class SymbolOutcome:
    symbol: str
    state: SymbolState = SymbolState.START
    error: Optional[str] = None
    # Last state reached before failing
    failed_after: Optional[SymbolState] = None

    @property
    def ok(self) -> bool:
        return self.state is SymbolState.PERSISTED


@dataclass
class RunSummary:
    outcomes: List[SymbolOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[str]:
        return [outcome.symbol for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self) -> List[str]:
        return [outcome.symbol for outcome in self.outcomes if not outcome.ok]


def check_presence(symbol: str, details: DetailsFragment) -> None:
    if not details.has_price:
        raise PresenceCheckFailed(
            f"Unable to find stock details for {symbol}",
            symbol=symbol,
            phase="details",
            field="price",
        )


class ScrapePipeline:
    def __init__(
        self,
        universe: SymbolUniverse,
        details: FragmentExtractor,
        holders: FragmentExtractor,
        events: FragmentExtractor,
        history: FragmentExtractor,
        store: RecordStore,
    ) -> None:
        self.universe = universe
        self.details = details
        self.holders = holders
        self.events = events
        self.history = history
        self.store = store

    async def _advance(self, outcome: SymbolOutcome) -> None:
        symbol = outcome.symbol

        details = await self.details.fetch(symbol)
        outcome.state = SymbolState.DETAILS_FETCHED

        check_presence(symbol, details)
        outcome.state = SymbolState.PRESENCE_CHECKED

        holders = await self.holders.fetch(symbol)
        events = await self.events.fetch(symbol)
        history = await self.history.fetch(symbol)
        outcome.state = SymbolState.FRAGMENTS_COLLECTED

        record = combine(symbol, details, holders, events, history)
        outcome.state = SymbolState.AGGREGATED

        await self.store.upsert(record)
        outcome.state = SymbolState.PERSISTED

    def _fail(self, outcome: SymbolOutcome, reason: str) -> None:
        outcome.failed_after = outcome.state
        outcome.state = SymbolState.FAILED
        outcome.error = reason

    async def process_symbol(self, symbol: str) -> SymbolOutcome:
        outcome = SymbolOutcome(symbol=symbol)
        try:
            await self._advance(outcome)
        except ScraperError as exc:
            self._fail(outcome, exc.message)
            log.error("failed to process {}: {}", symbol, exc.message)
        except Exception as exc:  # noqa: BLE001
            self._fail(outcome, f"{type(exc).__name__}: {exc}")
            log.exception("failed to process {}: {}", symbol, exc)
        else:
            log.info("success processing {}", symbol)
        return outcome

    async def run(self) -> RunSummary:
        symbols = await self.universe.resolve()
        log.info("{} symbols fetched", len(symbols))

        summary = RunSummary()
        for symbol in symbols:
            summary.outcomes.append(await self.process_symbol(symbol))

        log.info(
            "Run finished: {} succeeded, {} failed",
            len(summary.succeeded),
            len(summary.failed),
        )
        return summary


__all__ = ["ScrapePipeline", "SymbolState", "SymbolOutcome", "RunSummary", "check_presence"]
