"""Definition model exceptions."""

from __future__ import annotations


class DefinitionError(Exception):
    """Base class for all definition-related errors."""


class DefinitionValidationError(DefinitionError):
    """Raised when a definition document is malformed or fails validation."""


class UnknownCategoryError(DefinitionValidationError):
    """Raised when ``caps.categories`` names a category outside the taxonomy."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown category {name!r}")


class UnknownFieldError(DefinitionValidationError):
    """Raised when ``search.fields`` declares a field name that is not recognized."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown field {name!r}")


class DefinitionLoadError(DefinitionError):
    """Raised when a definition file cannot be read."""


class UnknownIndexerError(DefinitionError):
    """Raised when no loader knows the requested site key."""
