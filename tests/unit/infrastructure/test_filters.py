"""Tests for the named text filters."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from indexarr.domain.definitions import FilterBlock
from indexarr.domain.indexers import FilterError, UnknownFilterError
from indexarr.infrastructure.scraping import (
    FilterContext,
    apply_filters,
    format_time,
    invoke_filter,
    known_filters,
)
from indexarr.infrastructure.scraping.filters import (
    filter_querystring,
    filter_regexp,
    layout_to_strptime,
)


class TestQuerystring:
    def test_extracts_param(self) -> None:
        assert filter_querystring("llamas", "http://example.com/test?llamas=1") == "1"

    def test_missing_param_is_empty(self) -> None:
        assert filter_querystring("alpacas", "http://example.com/test?llamas=1") == ""

    def test_relative_url(self) -> None:
        assert filter_querystring("id", "details.php?id=42&hit=1") == "42"


class TestRegexp:
    def test_first_group(self) -> None:
        assert filter_regexp(r"^(\d+) seeders", "12 seeders") == "12"

    def test_whole_match_without_groups(self) -> None:
        assert filter_regexp(r"\d+", "abc 123 def") == "123"

    def test_no_match(self) -> None:
        with pytest.raises(FilterError, match="No matches"):
            filter_regexp(r"^(\d+) seeders", "no seeders here")

    def test_invalid_pattern(self) -> None:
        with pytest.raises(FilterError, match="Invalid pattern"):
            filter_regexp("(", "x")


class TestReferenceLayouts:
    @pytest.mark.parametrize(
        ("layout", "expected"),
        [
            ("2006-01-02 15:04:05", "%Y-%m-%d %H:%M:%S"),
            ("Monday, Jan 02, 2006", "%A, %b %d, %Y"),
            ("02 January 2006 3:04PM", "%d %B %Y %I:%M%p"),
            ("2006-01-02T15:04:05-07:00", "%Y-%m-%dT%H:%M:%S%z"),
        ],
    )
    def test_translation(self, layout: str, expected: str) -> None:
        assert layout_to_strptime(layout) == expected


class TestInvokeFilter:
    def test_dateparse_reference_layout(self, filter_ctx: FilterContext) -> None:
        out = invoke_filter("dateparse", "2006-01-02 15:04", "2016-08-20 13:45", filter_ctx)
        assert out == "Sat, 20 Aug 2016 13:45:00 +0000"

    def test_dateparse_tries_layouts_in_order(self, filter_ctx: FilterContext) -> None:
        out = invoke_filter(
            "dateparse", ["%d/%m/%Y", "%Y.%m.%d"], "2016.08.20", filter_ctx
        )
        assert out == "Sat, 20 Aug 2016 00:00:00 +0000"

    def test_dateparse_no_match(self, filter_ctx: FilterContext) -> None:
        with pytest.raises(FilterError, match="No matching date pattern"):
            invoke_filter("dateparse", "2006-01-02", "yesterday-ish", filter_ctx)

    def test_split(self, filter_ctx: FilterContext) -> None:
        assert invoke_filter("split", ["/", 1], "a/b/c", filter_ctx) == "b"
        assert invoke_filter("split", ["/", -1], "a/b/c", filter_ctx) == "c"

    def test_split_out_of_range(self, filter_ctx: FilterContext) -> None:
        with pytest.raises(FilterError, match="out of range"):
            invoke_filter("split", ["/", 5], "a/b", filter_ctx)

    def test_split_bad_args(self, filter_ctx: FilterContext) -> None:
        with pytest.raises(FilterError, match="int argument"):
            invoke_filter("split", ["/", "1"], "a/b", filter_ctx)

    def test_replace(self, filter_ctx: FilterContext) -> None:
        assert invoke_filter("replace", [",", ""], "1,234", filter_ctx) == "1234"

    def test_trim(self, filter_ctx: FilterContext) -> None:
        assert invoke_filter("trim", None, "  x  ", filter_ctx) == "x"
        assert invoke_filter("trim", "-", "--x--", filter_ctx) == "x"

    def test_append_prepend(self, filter_ctx: FilterContext) -> None:
        assert invoke_filter("append", " GB", "4", filter_ctx) == "4 GB"
        assert invoke_filter("prepend", "S", "01", filter_ctx) == "S01"

    def test_timeago_uses_context_clock(self, filter_ctx: FilterContext) -> None:
        assert (
            invoke_filter("timeago", None, "1 day ago", filter_ctx)
            == "Mon, 09 Nov 2009 23:00:00 +0000"
        )

    def test_timeago_without_ago(self, filter_ctx: FilterContext) -> None:
        assert invoke_filter("timeago", None, "10.5 years", filter_ctx) == format_time(
            filter_ctx.now - timedelta(days=3832.5)
        )

    def test_fuzzytime(self, filter_ctx: FilterContext) -> None:
        assert (
            invoke_filter("fuzzytime", None, "Today 10:00am", filter_ctx)
            == "Tue, 10 Nov 2009 10:00:00 +0000"
        )

    def test_unparseable_fuzzy_time(self, filter_ctx: FilterContext) -> None:
        with pytest.raises(FilterError, match="fuzzy time"):
            invoke_filter("reltime", None, "whenever", filter_ctx)

    def test_unknown_filter(self, filter_ctx: FilterContext) -> None:
        with pytest.raises(UnknownFilterError) as excinfo:
            invoke_filter("llamafy", None, "x", filter_ctx)
        assert excinfo.value.name == "llamafy"

    def test_known_filters(self) -> None:
        assert {"querystring", "dateparse", "regexp", "split", "timeago"} <= set(
            known_filters()
        )


class TestApplyFilters:
    def test_pipeline_in_order(self, filter_ctx: FilterContext) -> None:
        filters = (
            FilterBlock("regexp", r"(\d+) seeders"),
            FilterBlock("prepend", "S:"),
        )
        assert apply_filters("Seeded by 12 seeders", filters, filter_ctx) == "S:12"

    def test_logs_each_step(self) -> None:
        logger = MagicMock()
        ctx = FilterContext(now=datetime(2020, 1, 1, tzinfo=timezone.utc), logger=logger)
        apply_filters("a", (FilterBlock("append", "b"), FilterBlock("append", "c")), ctx)
        assert logger.debug.call_count == 2
        logger.debug.assert_called_with(
            "filter_applied", filter="append", args="c", before="ab", after="abc"
        )
