from __future__ import annotations

import asyncio
from typing import Optional

from dotenv import load_dotenv

from b3scraper.core.config import Config
from b3scraper.core.fetcher import build_fetcher
from b3scraper.core.pipeline import RunSummary, ScrapePipeline
from b3scraper.core.storage import RecordStore, build_store
from b3scraper.sources.fundamentus import (
    DEFAULT_BASE_URL,
    DEFAULT_EVENTS_CATEGORY,
    DetailsExtractor,
    EventsExtractor,
    HoldersExtractor,
)
from b3scraper.sources.yahoo import DEFAULT_MARKET_SUFFIX, HistoryExtractor
from b3scraper.symbols.universe import build_universe
from b3scraper.utils.logger import get_logger, setup_logging
from b3scraper.utils.yahoo_session import YahooSession


def build_pipeline(fetcher, store: RecordStore, session: Optional[YahooSession] = None) -> ScrapePipeline:
    """Wire extractors, store and universe from settings.yaml."""
    base_url = Config.get("sources", "fundamentus_base_url", default=DEFAULT_BASE_URL)
    category = int(Config.get("sources", "events_category", default=DEFAULT_EVENTS_CATEGORY))

    return ScrapePipeline(
        universe=build_universe(store, fetcher, Config.get("universe", default={})),
        details=DetailsExtractor(fetcher, base_url=base_url),
        holders=HoldersExtractor(fetcher, base_url=base_url),
        events=EventsExtractor(fetcher, base_url=base_url, category=category),
        history=HistoryExtractor(
            fetcher,
            session=session,
            base_url=Config.get("sources", "yahoo_base_url"),
            market_suffix=Config.get("sources", "market_suffix", default=DEFAULT_MARKET_SUFFIX),
        ),
        store=store,
    )


async def _run() -> RunSummary:
    store = build_store(Config.get("storage", default={}))
    try:
        fetcher = build_fetcher(Config.get("fetcher", default={}))
        try:
            session = YahooSession() if Config.get("sources", "yahoo_session", default=True) else None
            return await build_pipeline(fetcher, store, session).run()
        finally:
            await fetcher.close()
    finally:
        await store.close()


def run_scraper() -> RunSummary:
    """Public entry point: one pass over the configured universe."""
    load_dotenv()
    setup_logging()
    log = get_logger(__name__)

    summary = asyncio.run(_run())
    log.debug("Run summary: {} ok, {} failed", len(summary.succeeded), len(summary.failed))
    return summary


def main() -> None:
    run_scraper()


__all__ = ["run_scraper", "build_pipeline", "main"]
