"""Port for per-site key/value configuration (credentials, url overrides)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SiteConfigPort(Protocol):
    """Sectioned string store; one section per site key.

    ``get`` returns ``None`` for a missing key. Storage failures raise.
    """

    def get(self, section: str, key: str) -> str | None: ...
    def set(self, section: str, key: str, value: str) -> None: ...
    def section(self, name: str) -> dict[str, str]: ...
    def sections(self) -> list[str]: ...
