"""Tests for the input template language."""

from __future__ import annotations

import pytest

from indexarr.domain.indexers import TemplateError
from indexarr.infrastructure.scraping import Template, render_template

_CTX = {
    "Config": {"username": "llama", "password": "s3cret"},
    "Query": {"Keywords": "llamas S01", "Q": "llamas", "Season": "", "Extended": False},
    "Categories": ["1", "5"],
    "Keywords": "llamas S01",
}


class TestRenderTemplate:
    def test_plain_text_untouched(self) -> None:
        assert render_template("no actions here", {}) == "no actions here"

    def test_field_access(self) -> None:
        assert render_template("{{ .Config.username }}", _CTX) == "llama"

    def test_nested_field(self) -> None:
        assert render_template("q={{ .Query.Keywords }}&x=1", _CTX) == "q=llamas S01&x=1"

    def test_list_renders_space_joined(self) -> None:
        assert render_template("{{ .Categories }}", _CTX) == "1 5"

    def test_bool_renders_lowercase(self) -> None:
        assert render_template("{{ .Query.Extended }}", _CTX) == "false"

    def test_range(self) -> None:
        tpl = "{{ range .Categories }}filter_cat[{{.}}]=1&{{end}}"
        assert render_template(tpl, _CTX) == "filter_cat[1]=1&filter_cat[5]=1&"

    def test_range_root_access(self) -> None:
        tpl = "{{ range .Categories }}{{ $.Query.Q }}:{{ . }};{{ end }}"
        assert render_template(tpl, _CTX) == "llamas:1;llamas:5;"

    def test_if_else(self) -> None:
        tpl = "{{ if .Query.Season }}season{{ else }}any{{ end }}"
        assert render_template(tpl, _CTX) == "any"
        assert render_template("{{ if .Keywords }}kw{{ end }}", _CTX) == "kw"

    def test_trim_markers(self) -> None:
        tpl = "a   {{- .Query.Q -}}   b"
        assert render_template(tpl, _CTX) == "allamasb"

    def test_missing_key(self) -> None:
        with pytest.raises(TemplateError, match="no value"):
            render_template("{{ .Config.cookie }}", _CTX)

    @pytest.mark.parametrize(
        "source",
        [
            "{{ range .Categories }}never closed",
            "{{ .Config.username ",
            "{{ len .Categories }}",
            "{{ end }}",
        ],
    )
    def test_syntax_errors(self, source: str) -> None:
        with pytest.raises(TemplateError):
            render_template(source, _CTX)


class TestTemplate:
    def test_parse_once_render_many(self) -> None:
        tpl = Template("{{ .Config.username }}")
        assert tpl.render(_CTX) == "llama"
        assert tpl.render({"Config": {"username": "alpaca"}}) == "alpaca"
