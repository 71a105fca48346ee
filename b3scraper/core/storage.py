"""Record stores: one document per symbol, replaced wholesale on every write."""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from b3scraper.core.errors import ConfigError, PersistenceError
from b3scraper.models import StockRecord
from b3scraper.utils.logger import get_logger

log = get_logger(__name__)


class RecordStore(ABC):
    """Upsert/exists capability keyed by symbol name."""

    @abstractmethod
    async def upsert(self, record: StockRecord) -> None:
        """Insert or fully replace the record stored for ``record.name``."""

    @abstractmethod
    async def list_symbols(self) -> List[str]:
        """Symbols that currently have a stored record."""

    @abstractmethod
    async def get(self, symbol: str) -> Optional[StockRecord]:
        """Stored record for ``symbol`` or None."""

    async def exists(self, symbol: str) -> bool:
        return symbol in await self.list_symbols()

    async def close(self) -> None:
        return None


class FileRecordStore(RecordStore):
    """Persist records as ``<data_dir>/<SYMBOL>.json``."""

    def __init__(self, data_dir: Path | str = Path("data")) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, symbol: str) -> Path:
        return self.data_dir / f"{symbol}.json"

    async def upsert(self, record: StockRecord) -> None:
        target = self.path_for(record.name)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self._write_atomic(target, record.to_document())
        except OSError as exc:
            raise PersistenceError(
                f"Unable to write {target}: {exc}",
                symbol=record.name,
                path=str(target),
                operation="upsert",
            ) from exc

    def _write_atomic(self, target: Path, payload: Dict[str, Any]) -> None:
        # Readers see either the previous file or the new one, never a mix
        temp_fd, temp_path = tempfile.mkstemp(prefix=".tmp_", suffix=".json", dir=self.data_dir)
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as temp_file:
                json.dump(payload, temp_file, indent=2, ensure_ascii=False)
            os.replace(temp_path, target)
        finally:
            if os.path.exists(temp_path):
                os.unlink(temp_path)

    async def list_symbols(self) -> List[str]:
        if not self.data_dir.exists():
            return []
        return sorted(path.stem for path in self.data_dir.glob("*.json") if not path.name.startswith("."))

    async def exists(self, symbol: str) -> bool:
        return self.path_for(symbol).is_file()

    async def get(self, symbol: str) -> Optional[StockRecord]:
        path = self.path_for(symbol)
        if not path.is_file():
            return None
        try:
            with path.open("r", encoding="utf-8") as fp:
                return StockRecord.from_document(json.load(fp))
        except (OSError, ValueError, KeyError) as exc:
            raise PersistenceError(
                f"Unable to read {path}: {exc}", symbol=symbol, path=str(path), operation="get"
            ) from exc


def build_store(settings: Optional[Dict[str, Any]] = None) -> RecordStore:
    """Create the record store selected by the ``storage`` section of settings.yaml"""
    settings = settings or {}
    backend = settings.get("backend", "filesystem")

    if backend == "filesystem":
        return FileRecordStore(settings.get("data_dir", "data"))

    if backend == "mongo":
        from b3scraper.core.mongo_repository import MongoRecordStore

        return MongoRecordStore.from_settings(settings)

    raise ConfigError(f"Unknown storage backend: {backend}", key="backend", section="storage")


__all__ = ["RecordStore", "FileRecordStore", "build_store"]
