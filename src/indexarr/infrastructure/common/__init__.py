"""Common infrastructure utilities."""

from __future__ import annotations

from .parsers import parse_float, parse_int, parse_size_to_bytes

__all__ = [
    "parse_float",
    "parse_int",
    "parse_size_to_bytes",
]
