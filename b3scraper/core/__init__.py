"""Core processing modules: transport, storage, aggregation and orchestration."""

from .errors import (
    ConfigError,
    ParseError,
    PersistenceError,
    PresenceCheckFailed,
    ScraperError,
    TransportError,
)

__all__ = [
    "ConfigError",
    "ParseError",
    "PersistenceError",
    "PresenceCheckFailed",
    "ScraperError",
    "TransportError",
]
