from .catmap import CategoryMap
from .definition_schema import (
    DEFAULT_SETTINGS,
    CapabilitiesBlock,
    DefinitionStats,
    ErrorBlock,
    FieldDefinition,
    FieldKind,
    FilterBlock,
    IndexerDefinition,
    LoginBlock,
    PageTestBlock,
    RatioBlock,
    RowsBlock,
    SearchBlock,
    SelectorBlock,
    SettingsField,
)
from .exceptions import (
    DefinitionError,
    DefinitionLoadError,
    DefinitionValidationError,
    UnknownCategoryError,
    UnknownFieldError,
    UnknownIndexerError,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "CapabilitiesBlock",
    "CategoryMap",
    "DefinitionError",
    "DefinitionLoadError",
    "DefinitionStats",
    "DefinitionValidationError",
    "ErrorBlock",
    "FieldDefinition",
    "FieldKind",
    "FilterBlock",
    "IndexerDefinition",
    "LoginBlock",
    "PageTestBlock",
    "RatioBlock",
    "RowsBlock",
    "SearchBlock",
    "SelectorBlock",
    "SettingsField",
    "UnknownCategoryError",
    "UnknownFieldError",
    "UnknownIndexerError",
]
