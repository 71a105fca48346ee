"""Assembly of the canonical stock record from the four fragments."""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Sequence

from b3scraper.models import (
    CurrentState,
    DetailsFragment,
    DividendEvent,
    HistorySeries,
    HolderEntry,
    StockRecord,
)
from b3scraper.utils.cleaner import DataCleaner

# Aggregate rows of the shareholder table that are not real holders
EXCLUDED_HOLDER_NAMES: FrozenSet[str] = frozenset({"outros", "acoestesouraria"})


def filter_holders(
    holders: Iterable[HolderEntry],
    excluded: FrozenSet[str] = EXCLUDED_HOLDER_NAMES,
) -> List[HolderEntry]:
    return [holder for holder in holders if DataCleaner.normalize_name(holder.name) not in excluded]


def combine(
    symbol: str,
    details: DetailsFragment,
    holders: Sequence[HolderEntry],
    events: Sequence[DividendEvent],
    history: HistorySeries,
) -> StockRecord:
    """Build the record persisted for ``symbol``.

    Missing numeric values stay ``None``; events keep source order.
    """
    return StockRecord(
        name=symbol,
        business=details.business,
        current_state=CurrentState(
            price=details.price,
            price_to_earnings=details.price_to_earnings,
            debt_by_annual_equity=history.debt_by_annual_equity,
            holders=tuple(filter_holders(holders)),
        ),
        events=tuple(events),
        earnings_per_share=tuple(history.earnings_per_share),
        net_margin=tuple(history.net_margin),
    )


__all__ = ["combine", "filter_holders", "EXCLUDED_HOLDER_NAMES"]
