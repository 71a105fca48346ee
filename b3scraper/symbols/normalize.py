"""Normalisation helpers for B3 ticker symbols."""

from __future__ import annotations

import re

_normalise_re = re.compile(r"[^A-Z0-9]")

_SUFFIXES = (".SA",)


def normalise_symbol(raw: str) -> str:
    if raw is None:
        raise ValueError("Symbol value is required")
    candidate = raw.strip().upper()
    for suffix in _SUFFIXES:
        if candidate.endswith(suffix):
            candidate = candidate[: -len(suffix)]
            break
    candidate = _normalise_re.sub("", candidate)
    if not candidate:
        raise ValueError(f"Unable to normalise symbol: {raw}")
    return candidate


__all__ = ["normalise_symbol"]
