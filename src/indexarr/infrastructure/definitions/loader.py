"""Definition loading: parse documents, find them on disk, pick enabled ones."""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

import structlog
import yaml
from pydantic import ValidationError

from indexarr.domain.definitions import (
    DefinitionLoadError,
    DefinitionStats,
    DefinitionValidationError,
    IndexerDefinition,
    UnknownIndexerError,
)
from indexarr.domain.ports import DefinitionLoaderPort, SiteConfigPort
from indexarr.infrastructure.config.site_store import is_section_enabled
from indexarr.infrastructure.definitions.adapters import to_domain_definition
from indexarr.infrastructure.definitions.validation_schema import (
    IndexerDefinitionPydantic,
)

log = structlog.get_logger(__name__)

DEFINITION_SUFFIXES = (".yml", ".yaml")


def parse_definition(src: bytes | str, *, source: str = "") -> IndexerDefinition:
    """Parse and validate a definition document. Pure, no I/O.

    Defaults applied: ``language="en-us"``, ``login.form="form"`` and the
    username/password settings when none are declared.

    Raises:
        DefinitionValidationError: malformed YAML, schema violation, unknown
            category name or unknown field name.
    """
    raw = src.encode("utf-8") if isinstance(src, str) else src
    try:
        data = yaml.safe_load(raw)
        if data is None:
            raise DefinitionValidationError("Definition document is empty")
        if not isinstance(data, dict):
            raise DefinitionValidationError("Definition root must be a mapping")

        pydantic_model = IndexerDefinitionPydantic.model_validate(data)
        stats = DefinitionStats(
            size=len(raw),
            hash=hashlib.sha1(raw).hexdigest(),
            source=source,
            loaded_at=datetime.now(timezone.utc),
        )
        return to_domain_definition(pydantic_model, stats)
    except ValidationError as e:
        log.error(
            "definition_validation_failed",
            source=source,
            error_type="ValidationError",
            error_details=e.errors(),
        )
        raise DefinitionValidationError(str(e)) from e
    except yaml.YAMLError as e:
        log.error(
            "definition_validation_failed",
            source=source,
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise DefinitionValidationError(str(e)) from e
    except DefinitionValidationError as e:
        log.error(
            "definition_validation_failed",
            source=source,
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise


def load_definition_file(path: Path) -> IndexerDefinition:
    try:
        raw = path.read_bytes()
    except OSError as e:
        log.error(
            "definition_load_failed",
            definition_file=str(path),
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise DefinitionLoadError(str(e)) from e
    return parse_definition(raw, source=str(path))


class FsDefinitionLoader:
    """Finds ``<key>.yml`` files in a list of directories.

    Directories are searched in order; the first one holding a key wins.
    Missing directories are skipped.
    """

    def __init__(self, dirs: Sequence[Path]) -> None:
        self._dirs = [Path(d) for d in dirs]

    @property
    def dirs(self) -> list[Path]:
        return list(self._dirs)

    def _walk(self) -> dict[str, Path]:
        found: dict[str, Path] = {}
        for directory in self._dirs:
            if not directory.is_dir():
                log.debug("definition_directory_not_found", directory=str(directory))
                continue
            for path in sorted(directory.iterdir(), key=lambda p: p.name):
                if path.is_file() and path.suffix.lower() in DEFINITION_SUFFIXES:
                    found.setdefault(path.stem, path)
        return found

    def list(self) -> list[str]:
        return sorted(self._walk())

    def load(self, key: str) -> IndexerDefinition:
        path = self._walk().get(key)
        if path is None:
            raise UnknownIndexerError(f"Unknown indexer {key!r}")
        return load_definition_file(path)


class MultiDefinitionLoader:
    """Chains loaders; earlier loaders take precedence for the same key."""

    def __init__(self, loaders: Sequence[DefinitionLoaderPort]) -> None:
        self._loaders = list(loaders)

    def list(self) -> list[str]:
        keys: set[str] = set()
        for loader in self._loaders:
            keys.update(loader.list())
        return sorted(keys)

    def load(self, key: str) -> IndexerDefinition:
        for loader in self._loaders:
            try:
                return loader.load(key)
            except UnknownIndexerError:
                continue
        raise UnknownIndexerError(f"Unknown indexer {key!r}")


def load_enabled_definitions(
    loader: DefinitionLoaderPort, store: SiteConfigPort
) -> list[IndexerDefinition]:
    """Definitions whose site section has ``enabled: true``."""
    definitions: list[IndexerDefinition] = []
    for key in loader.list():
        if is_section_enabled(store, key):
            definitions.append(loader.load(key))
    return definitions
