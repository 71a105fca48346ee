"""Work-list resolution: which symbols a run should process."""

from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from b3scraper.core.errors import ConfigError
from b3scraper.core.storage import RecordStore
from b3scraper.symbols.normalize import normalise_symbol
from b3scraper.utils.logger import get_logger

log = get_logger(__name__)

DEFAULT_SYMBOLS_FILE = Path("config/symbols.json")
DEFAULT_DIRECTORY_URL = "https://finnhub.io/api/v1/stock/symbol"
DEFAULT_EXCHANGE = "SA"


def _unique(symbols: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for symbol in symbols:
        if symbol not in seen:
            seen.add(symbol)
            ordered.append(symbol)
    return ordered


def load_symbol_list(path: Path | str = DEFAULT_SYMBOLS_FILE) -> List[str]:
    """Read the static universe: a JSON array of ticker strings."""
    file_path = Path(path)
    try:
        contents = json.loads(file_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"Symbols file not found: {file_path}", key="symbols_file", section="universe") from exc
    except ValueError as exc:
        raise ConfigError(f"Symbols file is not valid JSON: {file_path}", key="symbols_file", section="universe") from exc
    if not isinstance(contents, list):
        raise ConfigError(f"Symbols file must hold a JSON array: {file_path}", key="symbols_file", section="universe")
    return [normalise_symbol(str(item)) for item in contents]


class SymbolUniverse(ABC):
    @abstractmethod
    async def resolve(self) -> List[str]:
        """Ordered work list for this run."""


class StaticSymbolUniverse(SymbolUniverse):
    """Fixed list minus the symbols already stored, so an interrupted run resumes."""

    def __init__(self, symbols: Iterable[str], store: RecordStore) -> None:
        self.symbols = _unique(symbols)
        self.store = store

    async def resolve(self) -> List[str]:
        stored = set(await self.store.list_symbols())
        pending = [symbol for symbol in self.symbols if symbol not in stored]
        log.debug("{} of {} symbols already stored", len(self.symbols) - len(pending), len(self.symbols))
        return pending


class DirectorySymbolUniverse(SymbolUniverse):
    """Every symbol the remote directory lists for ``exchange``, stored or not."""

    def __init__(self, fetcher, token: str, url: str = DEFAULT_DIRECTORY_URL, exchange: str = DEFAULT_EXCHANGE) -> None:
        self.fetcher = fetcher
        self.token = token
        self.url = url
        self.exchange = exchange

    async def resolve(self) -> List[str]:
        entries = await self.fetcher.fetch_json(self.url, params={"exchange": self.exchange, "token": self.token})
        if not isinstance(entries, list):
            log.warning("Symbol directory returned no list for exchange {}", self.exchange)
            return []

        symbols: List[str] = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            try:
                symbols.append(normalise_symbol(entry.get("symbol")))
            except ValueError:
                log.debug(f"Skipping directory entry without usable symbol: {entry}")
        return _unique(symbols)


def build_universe(store: RecordStore, fetcher, settings: Optional[Dict[str, Any]] = None) -> SymbolUniverse:
    """Create the universe policy selected by the ``universe`` section of settings.yaml"""
    settings = settings or {}
    policy = settings.get("policy", "static")

    if policy == "static":
        symbols = load_symbol_list(settings.get("symbols_file", DEFAULT_SYMBOLS_FILE))
        return StaticSymbolUniverse(symbols, store)

    if policy == "directory":
        token = os.getenv("FINNHUB_API_KEY")
        if not token:
            raise ConfigError("FINNHUB_API_KEY is required for the directory policy", key="FINNHUB_API_KEY")
        return DirectorySymbolUniverse(
            fetcher,
            token=token,
            url=settings.get("directory_url", DEFAULT_DIRECTORY_URL),
            exchange=settings.get("exchange", DEFAULT_EXCHANGE),
        )

    raise ConfigError(f"Unknown universe policy: {policy}", key="policy", section="universe")


__all__ = [
    "SymbolUniverse",
    "StaticSymbolUniverse",
    "DirectorySymbolUniverse",
    "build_universe",
    "load_symbol_list",
]
