"""
MongoDB Record Store

Stores one document per symbol in a collection, replaced wholesale by
``replace_one(..., upsert=True)``.
"""

from typing import Any, Dict, List, Optional

from pymongo.errors import PyMongoError

from b3scraper.core.db import DEFAULT_COLLECTION, DEFAULT_DATABASE, get_client
from b3scraper.core.errors import PersistenceError
from b3scraper.core.storage import RecordStore
from b3scraper.models import StockRecord
from b3scraper.utils.logger import get_logger

log = get_logger(__name__)


class MongoRecordStore(RecordStore):
    def __init__(self, collection, client=None) -> None:
        self._collection = collection
        self._client = client
        self._indexed = False

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "MongoRecordStore":
        client = get_client(settings.get("uri"))
        db = client[settings.get("database", DEFAULT_DATABASE)]
        return cls(db[settings.get("collection", DEFAULT_COLLECTION)], client=client)

    async def create_indexes(self) -> None:
        await self._collection.create_index("name", unique=True)
        self._indexed = True

    async def upsert(self, record: StockRecord) -> None:
        try:
            if not self._indexed:
                await self.create_indexes()
            await self._collection.replace_one({"name": record.name}, record.to_document(), upsert=True)
        except PyMongoError as exc:
            raise PersistenceError(
                f"Unable to upsert {record.name}: {exc}", symbol=record.name, operation="upsert"
            ) from exc

    async def list_symbols(self) -> List[str]:
        try:
            names = await self._collection.distinct("name")
        except PyMongoError as exc:
            raise PersistenceError(f"Unable to list stored symbols: {exc}", operation="list") from exc
        return sorted(names)

    async def exists(self, symbol: str) -> bool:
        try:
            doc = await self._collection.find_one({"name": symbol}, {"_id": 1})
        except PyMongoError as exc:
            raise PersistenceError(f"Unable to query {symbol}: {exc}", symbol=symbol, operation="exists") from exc
        return doc is not None

    async def get(self, symbol: str) -> Optional[StockRecord]:
        try:
            doc = await self._collection.find_one({"name": symbol}, {"_id": 0})
        except PyMongoError as exc:
            raise PersistenceError(f"Unable to read {symbol}: {exc}", symbol=symbol, operation="get") from exc
        return StockRecord.from_document(doc) if doc else None

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
