import math
import re
from datetime import datetime
from typing import Any, Optional

from b3scraper.utils.logger import get_logger

log = get_logger(__name__)

_NUMERIC_RE = re.compile(r'^[+-]?\d+(\.\d+)?$')


class DataCleaner:
    """
    Utility class for cleaning and normalizing scraped financial values.
    Missing or unparseable values become None, never zero.
    """

    @staticmethod
    def clean_decimal(value: Any) -> Optional[float]:
        """
        Parses a pt-BR formatted number ("1.234,56", "12,34") into a float.
        Text without a comma is read as a plain decimal ("0.5").
        """
        if value is None:
            return None

        if isinstance(value, bool):
            return None

        if isinstance(value, (int, float)):
            return float(value) if math.isfinite(value) else None

        if not isinstance(value, str):
            return None

        clean_str = value.strip().replace(' ', '').replace('\xa0', '')
        if ',' in clean_str:
            clean_str = clean_str.replace('.', '').replace(',', '.')

        if not _NUMERIC_RE.match(clean_str):
            if clean_str not in ('', '-'):
                log.debug(f"Could not convert string to numeric: {value!r}")
            return None

        return float(clean_str)

    @classmethod
    def clean_percentage(cls, value: Any) -> Optional[float]:
        """"5,67%" -> 5.67"""
        if isinstance(value, str):
            value = value.replace('%', '')
        return cls.clean_decimal(value)

    @staticmethod
    def clean_date(value: Any) -> Optional[datetime]:
        """
        Parses "DD/MM/YYYY" into a naive datetime at local midnight.
        """
        if not isinstance(value, str):
            return None
        try:
            return datetime.strptime(value.strip(), "%d/%m/%Y")
        except ValueError:
            log.debug(f"Could not parse date: {value!r}")
            return None

    @staticmethod
    def ratio(numerator: Optional[float], denominator: Optional[float]) -> Optional[float]:
        """numerator / denominator, or None when it cannot be computed"""
        if numerator is None or denominator is None or denominator == 0:
            return None
        result = numerator / denominator
        return result if math.isfinite(result) else None

    @staticmethod
    def normalize_name(name: str) -> str:
        """Comparison key for holder names: trimmed and case-folded"""
        return (name or "").strip().casefold()
