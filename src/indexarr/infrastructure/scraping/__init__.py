"""Scraping infrastructure: selectors, filters, fuzzy dates and input templates."""

from __future__ import annotations

from .filters import FilterContext, apply_filters, invoke_filter, known_filters
from .selectors import (
    is_match,
    match_text,
    matches,
    merge_following_rows,
    preceding_match,
    text,
)
from .template import Template, render_template
from .timeparse import TIME_FORMAT, format_time, parse_fuzzy_time, parse_time_ago

__all__ = [
    "TIME_FORMAT",
    "FilterContext",
    "Template",
    "apply_filters",
    "format_time",
    "invoke_filter",
    "is_match",
    "known_filters",
    "match_text",
    "matches",
    "merge_following_rows",
    "parse_fuzzy_time",
    "parse_time_ago",
    "preceding_match",
    "render_template",
    "text",
]
