"""Torznab API use case: wire parameters in, rendered document out."""

from __future__ import annotations

from dataclasses import replace
from typing import Literal

import structlog

from indexarr.domain.entities import (
    SEARCH_TYPE_ALIASES,
    TorznabError,
    TorznabMissingParameter,
    TorznabNoSuchFunction,
)
from indexarr.domain.ports import IndexerPort
from indexarr.infrastructure.torznab import (
    TorznabRendered,
    parse_query,
    render_caps_xml,
    render_error_xml,
    render_results_json,
    render_rss_xml,
)
from indexarr.infrastructure.torznab.query import WireParams

log = structlog.get_logger(__name__)

OutputFormat = Literal["xml", "json"]


class TorznabApiUseCase:
    """Answers ``t=caps`` and the search functions for one indexer.

    Protocol failures never escape: they are rendered as Torznab error
    documents (202 unknown function, 201 bad parameter, 900 anything
    unexpected).
    """

    def __init__(self, indexer: IndexerPort, *, output: OutputFormat = "xml") -> None:
        self._indexer = indexer
        self._output = output

    async def execute(self, params: WireParams) -> TorznabRendered:
        try:
            return await self._dispatch(params)
        except TorznabError as e:
            log.warning("torznab_error", code=e.code, description=e.description)
            return render_error_xml(e)
        except Exception as e:  # noqa: BLE001
            log.error(
                "torznab_unexpected_error",
                error_type=type(e).__name__,
                error=str(e),
            )
            return render_error_xml(TorznabError(str(e) or None, code=900))

    async def _dispatch(self, params: WireParams) -> TorznabRendered:
        query = parse_query(params)
        if not query.type:
            raise TorznabMissingParameter("Missing parameter t")

        if query.type == "caps":
            return render_caps_xml(self._indexer.capabilities())

        mode = SEARCH_TYPE_ALIASES.get(query.type)
        if mode is None:
            raise TorznabNoSuchFunction(f"Unknown type {query.type!r}")

        query = replace(query, type=mode)
        info = self._indexer.info()
        log.info("torznab_search", indexer=info.id, type=mode, q=query.q)
        items = await self._indexer.search(query)

        if self._output == "json":
            return render_results_json(items)
        return render_rss_xml(info, items)
