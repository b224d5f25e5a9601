"""Parsing utilities for scraped row values."""

from __future__ import annotations

import re

_SIZE_RE = re.compile(r"^([\d.]+)\s*([a-z]*)$")

_SIZE_UNITS: dict[str, int] = {
    "": 1,
    "b": 1,
    "byte": 1,
    "bytes": 1,
    "k": 1000,
    "kb": 1000,
    "kib": 1024,
    "m": 1000**2,
    "mb": 1000**2,
    "mib": 1024**2,
    "g": 1000**3,
    "gb": 1000**3,
    "gib": 1024**3,
    "t": 1000**4,
    "tb": 1000**4,
    "tib": 1024**4,
    "p": 1000**5,
    "pb": 1000**5,
    "pib": 1024**5,
}


def parse_size_to_bytes(size_str: str) -> int:
    """Parse a human readable size into bytes.

    Supports formats:
        - "1234" (raw bytes)
        - "4GB", "700 MB" (powers of 1000)
        - "1.5 GiB" (powers of 1024)
        - "1,234 KB" (commas are dropped)

    Raises:
        ValueError: unparseable number or unknown unit.
    """
    normalized = size_str.replace(",", "").strip().lower()
    match = _SIZE_RE.match(normalized)
    if not match:
        raise ValueError(f"unparseable size {size_str!r}")

    value, unit = match.groups()
    try:
        multiplier = _SIZE_UNITS[unit]
    except KeyError:
        raise ValueError(f"unknown size unit {unit!r} in {size_str!r}") from None
    return int(float(value) * multiplier)


def _normalize_number(raw: str) -> str:
    return raw.replace(",", "").strip() or "0"


def parse_int(raw: str) -> int:
    """``"1,234"`` -> 1234, ``""`` -> 0. Raises ValueError otherwise."""
    return int(_normalize_number(raw))


def parse_float(raw: str) -> float:
    return float(_normalize_number(raw))
