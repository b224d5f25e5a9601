"""Errors raised while running a definition against a live session."""

from __future__ import annotations


class IndexerError(Exception):
    """Base class for all runner-related errors."""


class ConfigurationError(IndexerError):
    """A setting the definition requires has no configured value."""


class LoginError(IndexerError):
    """Login was rejected by the site or could not be performed."""

    def __init__(self, message: str = "Login failed") -> None:
        self.message = message
        super().__init__(message)


class SearchError(IndexerError):
    """The search request could not be built or submitted."""


class TemplateError(IndexerError):
    """An input template could not be parsed or resolved."""


class NoWorkingUrlError(IndexerError):
    """None of the site's candidate base URLs answered with 200."""


class DownloadError(IndexerError):
    """The download target could not be fetched."""


class BrowserError(IndexerError):
    """A request failed at the transport level or a form was not found."""


class ExtractionError(IndexerError):
    """A selector block could not produce a value."""


class MissingAttributeError(ExtractionError):
    def __init__(self, attribute: str) -> None:
        self.attribute = attribute
        super().__init__(f"Requested attribute {attribute!r} doesn't exist")


class FilterError(ExtractionError):
    """A filter rejected its input or its arguments."""


class UnknownFilterError(FilterError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown filter {name!r}")
