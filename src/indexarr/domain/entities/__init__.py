from .categories import CUSTOM_CATEGORY_OFFSET, Category, parent_category
from .torznab import (
    ERROR_DESCRIPTIONS,
    SEARCH_TYPE_ALIASES,
    Capabilities,
    Info,
    Query,
    ResultItem,
    SearchMode,
    TorznabApiDisabled,
    TorznabError,
    TorznabFunctionNotAvailable,
    TorznabIncorrectCredentials,
    TorznabIncorrectParameter,
    TorznabMissingParameter,
    TorznabNoSuchFunction,
    TorznabNoSuchItem,
)

__all__ = [
    "CUSTOM_CATEGORY_OFFSET",
    "ERROR_DESCRIPTIONS",
    "SEARCH_TYPE_ALIASES",
    "Capabilities",
    "Category",
    "Info",
    "Query",
    "ResultItem",
    "SearchMode",
    "TorznabApiDisabled",
    "TorznabError",
    "TorznabFunctionNotAvailable",
    "TorznabIncorrectCredentials",
    "TorznabIncorrectParameter",
    "TorznabMissingParameter",
    "TorznabNoSuchFunction",
    "TorznabNoSuchItem",
    "parent_category",
]
