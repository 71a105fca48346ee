"""Fragments and the canonical per-symbol stock record."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple


def to_epoch_ms(value: Optional[datetime]) -> Optional[int]:
    """Milliseconds since the Unix epoch; naive values are read as local time."""
    if value is None:
        return None
    return int(round(value.timestamp() * 1000))


def _local_from_ms(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000)


def _utc_from_ms(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class DetailsFragment:
    price: Optional[float] = None
    business: str = ""
    price_to_earnings: Optional[float] = None

    @property
    def has_price(self) -> bool:
        return bool(self.price)


@dataclass(frozen=True)
class HolderEntry:
    name: str
    ordinary_shares: Optional[float] = None
    preferred_shares: Optional[float] = None
    total_shares: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "ordinaryShares": self.ordinary_shares,
            "preferredShares": self.preferred_shares,
            "totalShares": self.total_shares,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "HolderEntry":
        return cls(
            name=payload.get("name", ""),
            ordinary_shares=payload.get("ordinaryShares"),
            preferred_shares=payload.get("preferredShares"),
            total_shares=payload.get("totalShares"),
        )


@dataclass(frozen=True)
class DividendEvent:
    """One earnings distribution; ``date`` is a naive local-midnight datetime."""

    date: Optional[datetime]
    amount: Optional[float]
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return {"date": to_epoch_ms(self.date), "amount": self.amount, "type": self.type}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DividendEvent":
        return cls(
            date=_local_from_ms(payload.get("date")),
            amount=payload.get("amount"),
            type=payload.get("type", ""),
        )


@dataclass(frozen=True)
class SeriesPoint:
    period: datetime
    value: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {"period": to_epoch_ms(self.period), "value": self.value}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SeriesPoint":
        return cls(period=_utc_from_ms(payload.get("period")), value=payload.get("value"))


@dataclass(frozen=True)
class HistorySeries:
    debt_by_annual_equity: Optional[float] = None
    earnings_per_share: Tuple[SeriesPoint, ...] = ()
    net_margin: Tuple[SeriesPoint, ...] = ()


@dataclass(frozen=True)
class CurrentState:
    price: Optional[float]
    price_to_earnings: Optional[float]
    debt_by_annual_equity: Optional[float]
    holders: Tuple[HolderEntry, ...] = ()


@dataclass(frozen=True)
class StockRecord:
    """Canonical document persisted once per symbol."""

    name: str
    business: str
    current_state: CurrentState
    events: Tuple[DividendEvent, ...] = ()
    earnings_per_share: Tuple[SeriesPoint, ...] = ()
    net_margin: Tuple[SeriesPoint, ...] = ()

    def to_document(self) -> Dict[str, Any]:
        state = self.current_state
        return {
            "name": self.name,
            "business": self.business,
            "currentState": {
                "price": state.price,
                "priceToEarnings": state.price_to_earnings,
                "debtByAnnualEquity": state.debt_by_annual_equity,
                "holders": [holder.to_dict() for holder in state.holders],
            },
            "events": [event.to_dict() for event in self.events],
            "history": {
                "earningsPerShare": [point.to_dict() for point in self.earnings_per_share],
                "netMargin": [point.to_dict() for point in self.net_margin],
            },
        }

    @classmethod
    def from_document(cls, payload: Mapping[str, Any]) -> "StockRecord":
        state = payload.get("currentState") or {}
        history = payload.get("history") or {}
        return cls(
            name=payload["name"],
            business=payload.get("business", ""),
            current_state=CurrentState(
                price=state.get("price"),
                price_to_earnings=state.get("priceToEarnings"),
                debt_by_annual_equity=state.get("debtByAnnualEquity"),
                holders=tuple(HolderEntry.from_dict(h) for h in state.get("holders", [])),
            ),
            events=tuple(DividendEvent.from_dict(e) for e in payload.get("events", [])),
            earnings_per_share=tuple(SeriesPoint.from_dict(p) for p in history.get("earningsPerShare", [])),
            net_margin=tuple(SeriesPoint.from_dict(p) for p in history.get("netMargin", [])),
        )


__all__ = [
    "DetailsFragment",
    "HolderEntry",
    "DividendEvent",
    "SeriesPoint",
    "HistorySeries",
    "CurrentState",
    "StockRecord",
    "to_epoch_ms",
]
