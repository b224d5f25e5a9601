from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from .categories import Category

SearchModeKey = Literal["search", "tv-search", "movie-search"]

# Wire aliases accepted for ``t``; mapped onto the canonical mode key.
SEARCH_TYPE_ALIASES: dict[str, str] = {
    "search": "search",
    "tvsearch": "tv-search",
    "tv-search": "tv-search",
    "movie": "movie-search",
    "movie-search": "movie-search",
}


def _pad_left(value: str, pad: str, length: int) -> str:
    while len(value) < length:
        value = pad + value
    return value


@dataclass(frozen=True)
class Query:
    """Canonical search query (already parsed from wire parameters)."""

    type: str = ""
    q: str = ""
    season: str = ""
    ep: str = ""
    categories: tuple[int, ...] = ()
    limit: int = 0
    offset: int = 0
    extended: bool = False
    apikey: str = ""

    def episode(self) -> str:
        """``S02E12``, ``S02`` or ``E12`` depending on what is set."""
        out = ""
        if self.season:
            out += "S" + _pad_left(self.season, "0", 2)
        if self.ep:
            out += "E" + _pad_left(self.ep, "0", 2)
        return out

    def keywords(self) -> str:
        tokens: list[str] = []
        if self.q:
            tokens.append(self.q)
        if self.season or self.ep:
            tokens.append(self.episode())
        return " ".join(tokens)


@dataclass(frozen=True)
class ResultItem:
    site: str
    title: str
    link: str = ""
    guid: str = ""
    description: str = ""
    comments: str = ""
    category: int = 0
    size: int = 0
    seeders: int = 0
    peers: int = 0
    publish_date: datetime | None = None
    minimum_ratio: float = 0.0
    minimum_seed_time: float = 0.0  # seconds
    files: int | None = None
    grabs: int | None = None
    download_volume_factor: float = 1.0
    upload_volume_factor: float = 1.0


@dataclass(frozen=True)
class Info:
    id: str
    title: str
    description: str = ""
    link: str = ""
    language: str = "en-us"


@dataclass(frozen=True)
class SearchMode:
    key: str
    available: bool = True
    supported_params: tuple[str, ...] = ("q",)


@dataclass(frozen=True)
class Capabilities:
    search_modes: tuple[SearchMode, ...] = ()
    categories: tuple[Category, ...] = field(default_factory=tuple)

    def has_search_mode(self, key: str) -> tuple[bool, tuple[str, ...]]:
        for mode in self.search_modes:
            if mode.key == key and mode.available:
                return True, mode.supported_params
        return False, ()

    def has_tv_shows(self) -> bool:
        return any(5000 <= c.id < 6000 for c in self.categories)

    def has_movies(self) -> bool:
        return any(2000 <= c.id < 3000 for c in self.categories)


ERROR_DESCRIPTIONS: dict[int, str] = {
    100: "Incorrect user credentials",
    101: "Account suspended",
    102: "Insufficient privileges/not authorized",
    103: "Registration denied",
    104: "Registrations are closed",
    105: "Invalid registration (Email Address Taken)",
    106: "Invalid registration (Email Address Bad Format)",
    107: "Registration Failed (Data error)",
    200: "Missing parameter",
    201: "Incorrect parameter",
    202: "No such function. (Function not defined in this specification).",
    203: "Function not available. (Optional function is not implemented).",
    300: "No such item.",
    900: "Unknown error",
    910: "API Disabled",
}


class TorznabError(Exception):
    """Protocol-level error carrying a Newznab/Torznab error code."""

    code: int = 900

    def __init__(self, description: str | None = None, *, code: int | None = None):
        if code is not None:
            self.code = code
        self.description = description or ERROR_DESCRIPTIONS.get(
            self.code, ERROR_DESCRIPTIONS[900]
        )
        super().__init__(self.description)


class TorznabIncorrectCredentials(TorznabError):
    code = 100


class TorznabMissingParameter(TorznabError):
    code = 200


class TorznabIncorrectParameter(TorznabError):
    code = 201


class TorznabNoSuchFunction(TorznabError):
    code = 202


class TorznabFunctionNotAvailable(TorznabError):
    code = 203


class TorznabNoSuchItem(TorznabError):
    code = 300


class TorznabApiDisabled(TorznabError):
    code = 910
