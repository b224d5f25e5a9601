# src/indexarr/domain/definitions/definition_schema.py
"""Pure domain models for indexer definition documents (framework-free)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from indexarr.domain.entities.categories import Category
from indexarr.domain.entities.torznab import SearchMode

from .catmap import CategoryMap

LoginMethod = Literal["form", "post", "cookie"]
SearchMethod = Literal["get", "post"]


class FieldKind(str, Enum):
    """Closed set of result fields a definition may extract."""

    TITLE = "title"
    DESCRIPTION = "description"
    DETAILS = "details"
    COMMENTS = "comments"
    DOWNLOAD = "download"
    CATEGORY = "category"
    SIZE = "size"
    LEECHERS = "leechers"
    SEEDERS = "seeders"
    DATE = "date"
    FILES = "files"
    GRABS = "grabs"
    DOWNLOAD_VOLUME_FACTOR = "downloadvolumefactor"
    UPLOAD_VOLUME_FACTOR = "uploadvolumefactor"
    MINIMUM_RATIO = "minimumratio"
    MINIMUM_SEED_TIME = "minimumseedtime"

    @classmethod
    def names(cls) -> list[str]:
        return [f.value for f in cls]


@dataclass(frozen=True)
class SettingsField:
    name: str
    type: str = "text"
    label: str = ""


DEFAULT_SETTINGS: tuple[SettingsField, ...] = (
    SettingsField(name="username", type="text", label="Username"),
    SettingsField(name="password", type="password", label="Password"),
)


@dataclass(frozen=True)
class FilterBlock:
    name: str
    args: Any = None


@dataclass(frozen=True)
class SelectorBlock:
    """Where to find a value in a document and how to clean it up."""

    selector: str = ""
    text: str = ""
    attribute: str = ""
    remove: str = ""
    filters: tuple[FilterBlock, ...] = ()
    case: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return self.selector == ""

    def __str__(self) -> str:
        if self.selector:
            return f"Selector({self.selector})"
        if self.text:
            return f"Text({self.text})"
        return "Empty"


@dataclass(frozen=True)
class ErrorBlock:
    path: str = ""
    selector: str = ""
    message: SelectorBlock = field(default_factory=SelectorBlock)


@dataclass(frozen=True)
class PageTestBlock:
    path: str = ""
    selector: str = ""

    def is_empty(self) -> bool:
        return self.path == "" and self.selector == ""


@dataclass(frozen=True)
class LoginBlock:
    path: str = ""
    form_selector: str = "form"
    method: LoginMethod = "form"
    inputs: dict[str, str] = field(default_factory=dict)
    errors: tuple[ErrorBlock, ...] = ()
    test: PageTestBlock = field(default_factory=PageTestBlock)
    declared: bool = False

    def is_empty(self) -> bool:
        return not self.declared


@dataclass(frozen=True)
class RatioBlock:
    block: SelectorBlock = field(default_factory=SelectorBlock)
    path: str = ""


@dataclass(frozen=True)
class RowsBlock:
    block: SelectorBlock = field(default_factory=SelectorBlock)
    after: int = 0
    remove: str = ""
    date_headers: SelectorBlock = field(default_factory=SelectorBlock)

    @property
    def selector(self) -> str:
        return self.block.selector


@dataclass(frozen=True)
class FieldDefinition:
    kind: FieldKind
    block: SelectorBlock


@dataclass(frozen=True)
class SearchBlock:
    path: str = ""
    method: SearchMethod = "get"
    inputs: dict[str, str] = field(default_factory=dict)
    rows: RowsBlock = field(default_factory=RowsBlock)
    fields: tuple[FieldDefinition, ...] = ()

    def has_field(self, kind: FieldKind) -> bool:
        return any(f.kind is kind for f in self.fields)


@dataclass(frozen=True)
class CapabilitiesBlock:
    category_map: CategoryMap = field(default_factory=CategoryMap)
    search_modes: tuple[SearchMode, ...] = ()

    def categories(self) -> tuple[Category, ...]:
        return tuple(self.category_map.categories())


@dataclass(frozen=True)
class DefinitionStats:
    size: int = 0
    hash: str = ""
    source: str = ""
    loaded_at: datetime | None = None


@dataclass(frozen=True)
class IndexerDefinition:
    """One parsed site document. Immutable once parsed."""

    site: str
    name: str = ""
    description: str = ""
    language: str = "en-us"
    links: tuple[str, ...] = ()
    settings: tuple[SettingsField, ...] = DEFAULT_SETTINGS
    capabilities: CapabilitiesBlock = field(default_factory=CapabilitiesBlock)
    login: LoginBlock = field(default_factory=LoginBlock)
    ratio: RatioBlock = field(default_factory=RatioBlock)
    search: SearchBlock = field(default_factory=SearchBlock)
    stats: DefinitionStats = field(default_factory=DefinitionStats)
