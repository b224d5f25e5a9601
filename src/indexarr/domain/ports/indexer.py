"""Port implemented by single-site runners and the aggregate view."""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable

from indexarr.domain.entities import Capabilities, Info, Query, ResultItem


@runtime_checkable
class IndexerPort(Protocol):
    def info(self) -> Info: ...
    def capabilities(self) -> Capabilities: ...
    async def search(self, query: Query) -> list[ResultItem]: ...
    async def download(self, url: str) -> tuple[bytes, Mapping[str, str]]: ...
    async def aclose(self) -> None: ...
