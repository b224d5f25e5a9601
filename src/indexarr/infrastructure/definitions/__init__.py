from .loader import (
    FsDefinitionLoader,
    MultiDefinitionLoader,
    load_definition_file,
    load_enabled_definitions,
    parse_definition,
)

__all__ = [
    "FsDefinitionLoader",
    "MultiDefinitionLoader",
    "load_definition_file",
    "load_enabled_definitions",
    "parse_definition",
]
