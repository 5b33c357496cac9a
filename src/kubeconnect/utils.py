"""Shared parsing helpers for override values."""

from __future__ import annotations


def parse_bool(raw: str) -> bool:
    """Parse a boolean the way property files do: only ``"true"`` (any case) is true."""
    return raw.strip().lower() == "true"


def split_csv(raw: str) -> tuple[str, ...]:
    """Split a comma-separated list, dropping blanks and surrounding whitespace."""
    return tuple(part.strip() for part in raw.split(",") if part.strip())
