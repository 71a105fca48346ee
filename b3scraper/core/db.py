"""
MongoDB connection for the document-store binding.
"""

import os
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient

from b3scraper.core.errors import ConfigError
from b3scraper.utils.logger import get_logger

log = get_logger(__name__)

DEFAULT_DATABASE = "b3scraper"
DEFAULT_COLLECTION = "stocks"


def get_mongo_uri() -> str:
    """Get MongoDB URI from environment"""
    uri = os.getenv("MONGO_URI") or os.getenv("MONGODB_URI")
    if not uri:
        raise ConfigError("MongoDB connection string (MONGO_URI or MONGODB_URI) is not set", key="MONGO_URI")
    return uri


def get_client(uri: Optional[str] = None) -> AsyncIOMotorClient:
    client = AsyncIOMotorClient(uri or get_mongo_uri())
    log.debug("MongoDB client initialized")
    return client
