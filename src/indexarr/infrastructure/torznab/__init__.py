from __future__ import annotations

from .presenter import (
    TorznabRendered,
    render_caps_xml,
    render_error_xml,
    render_results_json,
    render_rss_xml,
)
from .query import encode_query, parse_query

__all__ = [
    "TorznabRendered",
    "encode_query",
    "parse_query",
    "render_caps_xml",
    "render_error_xml",
    "render_results_json",
    "render_rss_xml",
]
