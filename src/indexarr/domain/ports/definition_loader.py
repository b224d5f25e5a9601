"""Port for producing definitions from a site key."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from indexarr.domain.definitions import IndexerDefinition


@runtime_checkable
class DefinitionLoaderPort(Protocol):
    def list(self) -> list[str]: ...
    def load(self, key: str) -> IndexerDefinition: ...
