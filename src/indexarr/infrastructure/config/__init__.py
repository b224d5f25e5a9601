from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides
from .site_store import (
    MemorySiteConfig,
    YamlSiteConfig,
    get_default,
    is_section_enabled,
)

__all__ = [
    "AppConfig",
    "EnvOverrides",
    "MemorySiteConfig",
    "YamlSiteConfig",
    "get_default",
    "is_section_enabled",
    "load_config",
]
