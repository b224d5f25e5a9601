from .exceptions import (
    BrowserError,
    ConfigurationError,
    DownloadError,
    ExtractionError,
    FilterError,
    IndexerError,
    LoginError,
    MissingAttributeError,
    NoWorkingUrlError,
    SearchError,
    TemplateError,
    UnknownFilterError,
)

__all__ = [
    "BrowserError",
    "ConfigurationError",
    "DownloadError",
    "ExtractionError",
    "FilterError",
    "IndexerError",
    "LoginError",
    "MissingAttributeError",
    "NoWorkingUrlError",
    "SearchError",
    "TemplateError",
    "UnknownFilterError",
]
