"""Per-site key/value configuration stores."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import structlog
import yaml

from indexarr.domain.ports import SiteConfigPort

log = structlog.get_logger(__name__)


class MemorySiteConfig:
    """Sectioned in-memory store."""

    def __init__(self, data: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._data: dict[str, dict[str, str]] = {}
        for section, values in (data or {}).items():
            self._data[section] = {str(k): _to_str(v) for k, v in values.items()}

    def get(self, section: str, key: str) -> str | None:
        return self._data.get(section, {}).get(key)

    def set(self, section: str, key: str, value: str) -> None:
        self._data.setdefault(section, {})[key] = value

    def section(self, name: str) -> dict[str, str]:
        return dict(self._data.get(name, {}))

    def sections(self) -> list[str]:
        return sorted(self._data)


class YamlSiteConfig(MemorySiteConfig):
    """Store backed by a YAML file shaped ``{site: {key: value}}``.

    A missing file is an empty store; the file is created on first ``set``.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        super().__init__(self._read())

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, dict[str, Any]]:
        if not self._path.exists():
            log.debug("site_config_not_found", path=str(self._path))
            return {}
        parsed = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ValueError(f"Site config YAML must be a mapping, got: {type(parsed)!r}")
        out: dict[str, dict[str, Any]] = {}
        for section, values in parsed.items():
            if not isinstance(values, dict):
                raise ValueError(f"Site config section {section!r} must be a mapping")
            out[str(section)] = values
        return out

    def set(self, section: str, key: str, value: str) -> None:
        super().set(section, key, value)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            yaml.safe_dump(self._data, default_flow_style=False, sort_keys=True),
            encoding="utf-8",
        )
        log.info("site_config_saved", path=str(self._path), section=section, key=key)


def _to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


def is_section_enabled(store: SiteConfigPort, section: str) -> bool:
    return store.get(section, "enabled") in ("true", "ok")


def get_default(store: SiteConfigPort, section: str, key: str, default: str) -> str:
    value = store.get(section, key)
    return default if value is None else value
