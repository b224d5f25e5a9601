"""Tests for the definition smoke tester."""

from __future__ import annotations

import pytest

from indexarr.domain.entities import ResultItem
from indexarr.infrastructure.browser import HttpxBrowser
from indexarr.infrastructure.runner import (
    IndexerTester,
    Runner,
    TestReport,
    TestStep,
    assert_valid_results,
)
from indexarr.infrastructure.runner.tester import AssertionFailed


def _item(**overrides: object) -> ResultItem:
    values: dict[str, object] = {
        "site": "example",
        "title": "Llama",
        "link": "https://example.org/dl/1.torrent",
        "size": 1000,
    }
    values.update(overrides)
    return ResultItem(**values)  # type: ignore[arg-type]


class TestAssertValidResults:
    def test_accepts_complete_rows(self) -> None:
        assert_valid_results([_item(), _item(title="Other")])

    def test_rejects_empty(self) -> None:
        with pytest.raises(AssertionFailed, match="at least one"):
            assert_valid_results([])

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"title": ""}, "empty title"),
            ({"size": 0}, "zero size"),
            ({"link": ""}, "blank link"),
            ({"site": ""}, "blank site"),
        ],
    )
    def test_rejects_incomplete_row(self, overrides, message) -> None:
        with pytest.raises(AssertionFailed, match=message):
            assert_valid_results([_item(), _item(**overrides)])


class TestReportRendering:
    def test_ok_when_every_step_passed(self) -> None:
        report = TestReport(site="example", steps=[TestStep("a", True), TestStep("b", True)])
        assert report.ok is True
        assert report.render().endswith("Indexer example is OK")

    def test_failure_lists_error(self) -> None:
        report = TestReport(
            site="example",
            link="https://example.org/",
            steps=[TestStep("Testing login", False, "LoginError: nope", 0.5)],
        )
        rendered = report.render()
        assert report.ok is False
        assert "Testing login FAILURE in 0.50s: LoginError: nope" in rendered
        assert rendered.endswith("Indexer example FAILED")


class TestIndexerTester:
    @pytest.mark.asyncio
    async def test_all_steps_pass(self, example_definition, site_config, tracker) -> None:
        runner = Runner(example_definition, site_config, browser=HttpxBrowser())
        try:
            report = await IndexerTester(runner, download=True).run()
        finally:
            await runner.aclose()

        assert report.ok, report.render()
        assert [s.name for s in report.steps] == [
            "Testing login with valid credentials",
            "Testing search mode search",
            "Testing empty results are handled",
            "Testing ratio",
        ]
        assert report.link == "https://example.org/"

    @pytest.mark.asyncio
    async def test_stops_after_failed_login(
        self, example_definition, site_config, tracker
    ) -> None:
        tracker.password = "something-else"
        runner = Runner(example_definition, site_config, browser=HttpxBrowser())
        try:
            report = await IndexerTester(runner).run()
        finally:
            await runner.aclose()

        assert report.ok is False
        (step,) = report.steps
        assert step.error == "LoginError: Login failed"
        assert tracker.searches == []

    @pytest.mark.asyncio
    async def test_search_limit_is_applied(
        self, example_definition, site_config, tracker
    ) -> None:
        runner = Runner(example_definition, site_config, browser=HttpxBrowser())
        try:
            report = await IndexerTester(runner, search_limit=1).run()
        finally:
            await runner.aclose()

        assert report.ok
        assert tracker.searches[0].url.params["searchstr"] == ""
