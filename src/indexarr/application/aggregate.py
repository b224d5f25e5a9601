"""Fan one query out to many indexers and merge the answers fairly."""

from __future__ import annotations

import asyncio
from typing import Callable, Mapping, Sequence

import structlog

from indexarr.domain.entities import (
    Capabilities,
    Info,
    Query,
    ResultItem,
    SearchMode,
    TorznabFunctionNotAvailable,
)
from indexarr.domain.ports import IndexerPort

log = structlog.get_logger(__name__)

IndexerFactory = Callable[[], IndexerPort]

AGGREGATE_INFO = Info(
    id="aggregate",
    title="Aggregated Indexer",
    description="All enabled indexers",
    language="en-US",
)

AGGREGATE_CAPABILITIES = Capabilities(
    search_modes=(
        SearchMode(key="search", supported_params=("q",)),
        SearchMode(key="tv-search", supported_params=("q", "season", "ep")),
    ),
)


def interleave(groups: Sequence[Sequence[ResultItem]]) -> list[ResultItem]:
    """``[[a1, a2, a3], [b1, b2]]`` -> ``[a1, b1, a2, b2, a3]``."""
    merged: list[ResultItem] = []
    longest = max((len(g) for g in groups), default=0)
    for i in range(longest):
        for group in groups:
            if i < len(group):
                merged.append(group[i])
    return merged


class AggregateIndexer:
    """``IndexerPort`` over a fixed, ordered set of member indexers.

    Every search builds a fresh member per factory, so no session is ever
    shared between concurrent tasks. A failing member contributes nothing
    and never fails the aggregate.
    """

    def __init__(self, factories: Sequence[IndexerFactory]):
        self._factories = list(factories)

    def __len__(self) -> int:
        return len(self._factories)

    def info(self) -> Info:
        return AGGREGATE_INFO

    def capabilities(self) -> Capabilities:
        return AGGREGATE_CAPABILITIES

    async def _search_member(
        self, position: int, factory: IndexerFactory, query: Query
    ) -> list[ResultItem]:
        indexer: IndexerPort | None = None
        indexer_id = f"#{position}"
        try:
            indexer = factory()
            indexer_id = indexer.info().id
            results = await indexer.search(query)
        except Exception as e:  # noqa: BLE001
            log.warning(
                "aggregate_member_failed",
                indexer=indexer_id,
                position=position,
                error_type=type(e).__name__,
                error=str(e),
            )
            return []
        finally:
            if indexer is not None:
                await self._close_member(indexer, indexer_id)

        log.debug("aggregate_member_done", indexer=indexer_id, results=len(results))
        return results

    @staticmethod
    async def _close_member(indexer: IndexerPort, indexer_id: str) -> None:
        try:
            await indexer.aclose()
        except Exception as e:  # noqa: BLE001
            log.warning(
                "aggregate_member_close_failed",
                indexer=indexer_id,
                error_type=type(e).__name__,
                error=str(e),
            )

    async def search(self, query: Query) -> list[ResultItem]:
        groups = await asyncio.gather(
            *(
                self._search_member(pos, factory, query)
                for pos, factory in enumerate(self._factories)
            )
        )
        merged = interleave(groups)
        if query.limit > 0:
            merged = merged[: query.limit]

        log.info(
            "aggregate_search_completed",
            indexers=len(self._factories),
            results=len(merged),
        )
        return merged

    async def download(self, url: str) -> tuple[bytes, Mapping[str, str]]:
        raise TorznabFunctionNotAvailable(
            "Downloads are not supported by the aggregate indexer"
        )

    async def aclose(self) -> None:
        return None
