from __future__ import annotations

import functools
from pathlib import Path
from typing import Any, Mapping

import structlog
import yaml
from dotenv import load_dotenv
from pydantic import AliasPath

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

log = structlog.get_logger(__name__)


@functools.lru_cache(maxsize=1)
def _section_fields() -> dict[tuple[str, str], str]:
    """Map every ``(section, key)`` YAML path to the AppConfig field it feeds."""
    paths: dict[tuple[str, str], str] = {}
    for name, field in AppConfig.model_fields.items():
        alias = field.validation_alias
        if isinstance(alias, AliasPath) and len(alias.path) == 2:
            section, key = alias.path
            paths[(str(section), str(key))] = name
    return paths


def _flatten(layer: Mapping[str, Any], *, source: str) -> dict[str, Any]:
    """
    Turn one layer into flat AppConfig field names.

    A layer may mix the sectioned YAML shape (``http: {timeout_seconds: ..}``)
    with flat field names (``http_timeout_seconds``). Unknown keys are logged
    and dropped.
    """
    fields = _section_fields()
    flat: dict[str, Any] = {}
    for key, value in layer.items():
        if key in AppConfig.model_fields:
            flat[key] = value
        elif isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                name = fields.get((key, sub_key))
                if name is None:
                    log.warning("config_key_unknown", source=source, key=f"{key}.{sub_key}")
                    continue
                flat[name] = sub_value
        else:
            log.warning("config_key_unknown", source=source, key=key)
    return flat


def _read_yaml_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(config_path)
    parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """
    Build the final AppConfig from four layers, later ones winning per field:
    built-in defaults, the YAML file, INDEXARR_* environment variables
    (a dotenv file feeds this layer without replacing real variables) and
    command line overrides.

    Nothing is created on disk.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    layers: list[tuple[str, Mapping[str, Any]]] = [("defaults", DEFAULT_CONFIG)]
    if config_path is not None:
        layers.append(("yaml", _read_yaml_config(config_path)))
    layers.append(("env", EnvOverrides().to_update_dict()))
    layers.append(("cli", cli_overrides or {}))

    merged: dict[str, Any] = {}
    for source, layer in layers:
        merged.update(_flatten(layer, source=source))

    return AppConfig.model_validate(merged)
