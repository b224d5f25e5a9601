"""Pydantic validation models for indexer definition YAML documents."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class _Block(BaseModel):
    model_config = ConfigDict(extra="ignore")


class FilterBlockModel(_Block):
    name: str
    args: Any = None


class SelectorBlockModel(_Block):
    selector: str = ""
    text: str = ""
    attribute: str = ""
    remove: str = ""
    filters: List[FilterBlockModel] = Field(default_factory=list)
    case: Dict[str, str] = Field(default_factory=dict)

    @field_validator("text", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return _stringify(v)

    @field_validator("filters", mode="before")
    @classmethod
    def _none_filters(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("case", mode="before")
    @classmethod
    def _coerce_case(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(k): _stringify(val) for k, val in v.items()}
        return v


class ErrorBlockModel(_Block):
    path: str = ""
    selector: str = ""
    message: SelectorBlockModel = Field(default_factory=SelectorBlockModel)


class PageTestBlockModel(_Block):
    path: str = ""
    selector: str = ""


class LoginBlockModel(_Block):
    path: str = ""
    form: str = "form"
    method: Optional[Literal["form", "post", "cookie"]] = None
    inputs: Dict[str, str] = Field(default_factory=dict)
    error: List[ErrorBlockModel] = Field(default_factory=list)
    test: PageTestBlockModel = Field(default_factory=PageTestBlockModel)

    @field_validator("form", mode="before")
    @classmethod
    def _default_form(cls, v: Any) -> Any:
        return v or "form"

    @field_validator("method", mode="before")
    @classmethod
    def _lower_method(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @field_validator("inputs", mode="before")
    @classmethod
    def _coerce_inputs(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(k): _stringify(val) for k, val in v.items()}
        return v

    @field_validator("error", mode="before")
    @classmethod
    def _block_or_list(cls, v: Any) -> Any:
        # A single error block is accepted as shorthand for a one-item list.
        if v is None:
            return []
        if isinstance(v, dict):
            return [v]
        return v

    @field_validator("test", mode="before")
    @classmethod
    def _none_test(cls, v: Any) -> Any:
        return {} if v is None else v


class RatioBlockModel(SelectorBlockModel):
    path: str = ""


class RowsBlockModel(SelectorBlockModel):
    after: int = Field(default=0, ge=0)
    remove: str = ""
    dateheaders: SelectorBlockModel = Field(default_factory=SelectorBlockModel)


class SearchBlockModel(_Block):
    path: str = ""
    method: Literal["get", "post"] = "get"
    inputs: Dict[str, str] = Field(default_factory=dict)
    rows: RowsBlockModel = Field(default_factory=RowsBlockModel)
    field_blocks: Dict[str, SelectorBlockModel] = Field(
        default_factory=dict, alias="fields"
    )

    @field_validator("method", mode="before")
    @classmethod
    def _lower_method(cls, v: Any) -> Any:
        if v is None or v == "":
            return "get"
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("inputs", mode="before")
    @classmethod
    def _coerce_inputs(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(k): _stringify(val) for k, val in v.items()}
        return v

    @field_validator("field_blocks", mode="before")
    @classmethod
    def _none_fields(cls, v: Any) -> Any:
        return {} if v is None else v


class CapsBlockModel(_Block):
    categories: Dict[str, str] = Field(default_factory=dict)
    modes: Dict[str, List[str]] = Field(default_factory=dict)

    @field_validator("categories", mode="before")
    @classmethod
    def _coerce_categories(cls, v: Any) -> Any:
        # YAML turns numeric local ids into ints.
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(k): _stringify(val) for k, val in v.items()}
        return v

    @field_validator("modes", mode="before")
    @classmethod
    def _string_or_list(cls, v: Any) -> Any:
        if v is None:
            return {}
        if not isinstance(v, dict):
            return v
        out: dict[str, list[str]] = {}
        for key, params in v.items():
            if params is None:
                out[str(key)] = []
            elif isinstance(params, str):
                out[str(key)] = [p.strip() for p in params.split(",") if p.strip()]
            else:
                out[str(key)] = [str(p) for p in params]
        return out


class SettingsFieldModel(_Block):
    name: str
    type: str = "text"
    label: str = ""


class IndexerDefinitionPydantic(_Block):
    """Complete definition document as found on disk."""

    site: str = Field(..., min_length=1)
    settings: List[SettingsFieldModel] = Field(default_factory=list)
    name: str = ""
    description: str = ""
    language: str = "en-us"
    links: List[str] = Field(..., min_length=1)
    caps: CapsBlockModel = Field(default_factory=CapsBlockModel)
    login: Optional[LoginBlockModel] = None
    ratio: RatioBlockModel = Field(default_factory=RatioBlockModel)
    search: SearchBlockModel = Field(default_factory=SearchBlockModel)

    @field_validator("links", mode="before")
    @classmethod
    def _string_or_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("language", mode="before")
    @classmethod
    def _default_language(cls, v: Any) -> Any:
        return v or "en-us"

    @field_validator("settings", mode="before")
    @classmethod
    def _none_settings(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("caps", "ratio", "search", mode="before")
    @classmethod
    def _none_block(cls, v: Any) -> Any:
        return {} if v is None else v
