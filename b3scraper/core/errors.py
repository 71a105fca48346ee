"""
Scraper error hierarchy for clear classification of per-symbol failures in logs.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ScraperError(Exception):
    """Base class for all b3scraper errors."""

    def __init__(
        self,
        message: str,
        *,
        symbol: Optional[str] = None,
        phase: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.symbol = symbol
        self.phase = phase
        self.details = details or {}


class TransportError(ScraperError):
    """Raised when a source is unreachable or answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.url = url
        self.status_code = status_code
        if url is not None:
            self.details["url"] = url
        if status_code is not None:
            self.details["status_code"] = status_code


class ParseError(ScraperError):
    """Raised when a fetched document lacks an expected field."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.field = field
        if field is not None:
            self.details["field"] = field


class PresenceCheckFailed(ParseError):
    """Raised when the mandatory price of a symbol is missing."""


class PersistenceError(ScraperError):
    """Raised during read/write to a record store."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.path = path
        self.operation = operation
        if path is not None:
            self.details["path"] = path
        if operation is not None:
            self.details["operation"] = operation


class ConfigError(ScraperError):
    """Raised on missing/invalid configuration values."""

    def __init__(
        self,
        message: str,
        *,
        key: Optional[str] = None,
        section: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.key = key
        self.section = section
        if key is not None:
            self.details["key"] = key
        if section is not None:
            self.details["section"] = section


__all__ = [
    "ScraperError",
    "TransportError",
    "ParseError",
    "PresenceCheckFailed",
    "PersistenceError",
    "ConfigError",
]
