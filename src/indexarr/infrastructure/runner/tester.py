"""Smoke-test a definition against its live site."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

import structlog

from indexarr.domain.entities import Query, ResultItem, SearchMode
from indexarr.domain.entities.categories import TV_HD, TV_SD

from .runner import Runner

log = structlog.get_logger(__name__)

EMPTY_RESULTS_KEYWORD = "nothingshouldmatchtheseresults"


class AssertionFailed(Exception):
    """A tester expectation did not hold."""


@dataclass(frozen=True)
class TestStep:
    __test__ = False

    name: str
    ok: bool
    error: str = ""
    elapsed: float = 0.0


@dataclass
class TestReport:
    __test__ = False

    site: str
    link: str = ""
    steps: list[TestStep] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(step.ok for step in self.steps)

    def render(self) -> str:
        lines = [f"Testing indexer {self.site} ({self.link})"]
        for step in self.steps:
            status = "SUCCESS" if step.ok else "FAILURE"
            line = f"  {step.name} {status} in {step.elapsed:.2f}s"
            if step.error:
                line += f": {step.error}"
            lines.append(line)
        lines.append(f"Indexer {self.site} {'is OK' if self.ok else 'FAILED'}")
        return "\n".join(lines)


def assert_valid_results(results: list[ResultItem]) -> None:
    """Every row needs a title, a size, a link and a site."""
    if not results:
        raise AssertionFailed("Expected at least one result")
    for idx, result in enumerate(results, start=1):
        if not result.title:
            raise AssertionFailed(f"Result row {idx} has empty title")
        if result.size == 0:
            raise AssertionFailed(f"Result row {idx} has zero size")
        if not result.link:
            raise AssertionFailed(f"Result row {idx} has blank link")
        if not result.site:
            raise AssertionFailed(f"Result row {idx} has blank site")


class IndexerTester:
    """Runs login, one bounded search per mode, an empty search and ratio.

    Steps stop at the first failure; failures are recorded in the report,
    never raised.
    """

    def __init__(self, runner: Runner, *, search_limit: int = 3, download: bool = False):
        self.runner = runner
        self.search_limit = search_limit
        self.download = download

    async def _step(
        self, report: TestReport, name: str, fn: Callable[[], Awaitable[None]]
    ) -> bool:
        started = time.monotonic()
        error: Optional[Exception] = None
        try:
            await fn()
        except Exception as e:  # noqa: BLE001
            error = e
        elapsed = time.monotonic() - started

        step = TestStep(
            name=name,
            ok=error is None,
            error="" if error is None else f"{type(error).__name__}: {error}",
            elapsed=elapsed,
        )
        report.steps.append(step)
        if error is None:
            log.info("tester_step_passed", site=report.site, step=name, elapsed=elapsed)
        else:
            log.warning("tester_step_failed", site=report.site, step=name, error=step.error)
        return step.ok

    def _mode_query(self, mode: SearchMode) -> Query:
        if mode.key == "tv-search":
            return Query(
                type=mode.key,
                limit=self.search_limit,
                categories=(TV_HD.id, TV_SD.id),
            )
        return Query(type=mode.key, limit=self.search_limit)

    async def _test_mode(self, mode: SearchMode) -> None:
        results = await self.runner.search(self._mode_query(mode))
        assert_valid_results(results)
        if self.download:
            await self._test_download(results)

    async def _test_download(self, results: list[ResultItem]) -> None:
        for result in results:
            if result.link.startswith("magnet:"):
                continue
            data, _ = await self.runner.download(result.link)
            if not data:
                raise AssertionFailed(f"Download of {result.link} was empty")
            return

    async def _test_empty(self) -> None:
        results = await self.runner.search(Query(q=EMPTY_RESULTS_KEYWORD))
        if results:
            raise AssertionFailed(f"Expected no results, got {len(results)}")

    async def _test_ratio(self) -> None:
        ratio = await self.runner.ratio()
        log.info("tester_ratio", site=self.runner.site, ratio=ratio)

    async def run(self) -> TestReport:
        info = self.runner.info()
        report = TestReport(site=info.id, link=info.link)

        if not await self._step(report, "Testing login with valid credentials", self.runner.login):
            return report

        for mode in self.runner.capabilities().search_modes:
            ok = await self._step(
                report,
                f"Testing search mode {mode.key}",
                lambda mode=mode: self._test_mode(mode),
            )
            if not ok:
                return report

        if not await self._step(report, "Testing empty results are handled", self._test_empty):
            return report

        await self._step(report, "Testing ratio", self._test_ratio)
        return report
