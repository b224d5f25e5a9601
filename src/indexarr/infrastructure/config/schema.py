"""Pydantic models for the application settings and their environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, List, Literal, Optional

from pydantic import AliasPath, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _in_section(section: str, key: str, **kwargs: Any) -> Any:
    """Field read from ``section.key`` in sectioned YAML, or by its own name."""
    return Field(validation_alias=AliasPath(section, key), **kwargs)


def _as_path(value: Any) -> Path:
    # Pure conversion, nothing is created on disk.
    if isinstance(value, (str, Path)):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class AppConfig(BaseModel):
    """
    Validated runtime settings.

    Every sectioned field accepts its flat name too; load_config relies on
    the ``AliasPath`` of each field to flatten sectioned layers.
    """

    model_config = ConfigDict(populate_by_name=True)

    app_name: str = "indexarr"
    environment: Environment = "dev"

    definition_dirs: List[Path] = _in_section(
        "definitions",
        "dirs",
        default_factory=lambda: [Path("./definitions")],
        description="Where <site>.yml definitions live, highest priority first.",
    )

    http_timeout_seconds: float = _in_section("http", "timeout_seconds", default=10.0)
    http_follow_redirects: bool = _in_section("http", "follow_redirects", default=True)
    http_user_agent: str = _in_section("http", "user_agent", default="Indexarr/0.1.0")

    log_level: LogLevel = _in_section("logging", "level", default="INFO")
    # None means: json in prod, console elsewhere.
    log_format: Optional[LogFormat] = _in_section("logging", "format", default=None)

    sites_file: Path = _in_section(
        "sites",
        "file",
        default=Path("./sites.yml"),
        description="Per-site settings store (credentials, url, enabled).",
    )
    tester_search_limit: int = _in_section("tester", "search_limit", default=3)

    @field_validator("definition_dirs", mode="before")
    @classmethod
    def _validate_dirs(cls, v: Any) -> list[Path]:
        if isinstance(v, str):
            # INDEXARR_DEFINITION_DIRS=a,b or a:b
            v = [p for p in v.replace(os.pathsep, ",").split(",") if p.strip()]
        if not isinstance(v, (list, tuple)):
            raise TypeError(f"Expected a list of directories, got: {type(v)!r}")
        return [_as_path(p) for p in v]

    @field_validator("sites_file", mode="before")
    @classmethod
    def _validate_sites_file(cls, v: Any) -> Path:
        return _as_path(v)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("tester_search_limit")
    @classmethod
    def _validate_search_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("tester_search_limit must be >= 1")
        return v

    @model_validator(mode="after")
    def _derive_log_format(self) -> "AppConfig":
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self


class EnvOverrides(BaseSettings):
    """INDEXARR_<FIELD> environment variables, e.g. INDEXARR_LOG_LEVEL=DEBUG."""

    model_config = SettingsConfigDict(
        env_prefix="INDEXARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None
    definition_dirs: Optional[str] = None
    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None
    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None
    sites_file: Optional[str] = None
    tester_search_limit: Optional[int] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Only the variables that are actually set."""
        return self.model_dump(exclude_none=True)
