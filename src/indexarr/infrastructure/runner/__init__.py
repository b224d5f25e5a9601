from __future__ import annotations

from .runner import Runner, query_context
from .tester import IndexerTester, TestReport, TestStep, assert_valid_results

__all__ = [
    "IndexerTester",
    "Runner",
    "TestReport",
    "TestStep",
    "assert_valid_results",
    "query_context",
]
