"""A deliberately tiny ``{{ ... }}`` template language for definition inputs.

Supported actions, evaluated against nested dicts:

- ``{{ .A.B }}`` field access from the current value (``$.A`` from the root)
- ``{{ . }}`` the current value
- ``{{ range .Xs }}...{{ end }}`` iteration, with ``.`` bound to each item
- ``{{ if .X }}...{{ else }}...{{ end }}`` on truthiness
- ``{{-`` and ``-}}`` trim surrounding whitespace

There are no function calls and no arbitrary expressions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from indexarr.domain.indexers import TemplateError

_ACTION_RE = re.compile(r"\{\{(-\s)?\s*(.*?)\s*(\s-)?\}\}", re.S)
_PATH_RE = re.compile(r"^(?:\.|\$|\$?(?:\.[A-Za-z_]\w*)+)$")


@dataclass
class _Field:
    path: str


@dataclass
class _Range:
    path: str
    body: list["_Node"] = field(default_factory=list)


@dataclass
class _If:
    path: str
    then: list["_Node"] = field(default_factory=list)
    otherwise: list["_Node"] = field(default_factory=list)


_Node = Union[str, _Field, _Range, _If]


@dataclass
class _Action:
    text: str


def _tokenize(source: str) -> list[Union[str, _Action]]:
    tokens: list[Union[str, _Action]] = []
    pos = 0
    trim_next = False
    for m in _ACTION_RE.finditer(source):
        chunk = source[pos : m.start()]
        if trim_next:
            chunk = chunk.lstrip()
        if m.group(1):
            chunk = chunk.rstrip()
        if chunk:
            tokens.append(chunk)
        tokens.append(_Action(m.group(2)))
        trim_next = bool(m.group(3))
        pos = m.end()

    tail = source[pos:]
    if trim_next:
        tail = tail.lstrip()
    if "{{" in tail:
        raise TemplateError(f"unclosed action in {source!r}")
    if tail:
        tokens.append(tail)
    return tokens


class _Parser:
    def __init__(self, tokens: list[Union[str, _Action]], source: str):
        self._tokens = tokens
        self._source = source
        self._i = 0

    def parse(self) -> list[_Node]:
        nodes, _ = self._parse_list(frozenset())
        return nodes

    def _path(self, word: str, arg: str) -> str:
        if not _PATH_RE.match(arg):
            raise TemplateError(f"invalid argument {arg!r} to {word!r} in {self._source!r}")
        return arg

    def _parse_list(self, terminators: frozenset[str]) -> tuple[list[_Node], str]:
        nodes: list[_Node] = []
        while self._i < len(self._tokens):
            tok = self._tokens[self._i]
            self._i += 1
            if isinstance(tok, str):
                nodes.append(tok)
                continue

            word, _, arg = tok.text.partition(" ")
            arg = arg.strip()
            if word in terminators:
                return nodes, word
            if word == "range":
                body, _ = self._parse_list(frozenset({"end"}))
                nodes.append(_Range(self._path(word, arg), body))
            elif word == "if":
                then, term = self._parse_list(frozenset({"else", "end"}))
                otherwise: list[_Node] = []
                if term == "else":
                    otherwise, _ = self._parse_list(frozenset({"end"}))
                nodes.append(_If(self._path(word, arg), then, otherwise))
            elif _PATH_RE.match(tok.text):
                nodes.append(_Field(tok.text))
            else:
                raise TemplateError(f"unsupported action {tok.text!r} in {self._source!r}")

        if terminators:
            raise TemplateError(f"unexpected end of template {self._source!r}")
        return nodes, ""


def _lookup(value: Any, key: str, path: str) -> Any:
    if isinstance(value, Mapping):
        try:
            return value[key]
        except KeyError:
            raise TemplateError(f"no value for {path!r}") from None
    try:
        return getattr(value, key)
    except AttributeError:
        raise TemplateError(f"can't evaluate {key!r} in {path!r}") from None


def _resolve(path: str, dot: Any, root: Any) -> Any:
    if path == ".":
        return dot
    if path.startswith("$"):
        value, path = root, path[1:]
    else:
        value = dot
    for key in path.split(".")[1:]:
        value = _lookup(value, key, path)
    return value


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return " ".join(_stringify(v) for v in value)
    return str(value)


def _render(nodes: list[_Node], dot: Any, root: Any, out: list[str]) -> None:
    for node in nodes:
        if isinstance(node, str):
            out.append(node)
        elif isinstance(node, _Field):
            out.append(_stringify(_resolve(node.path, dot, root)))
        elif isinstance(node, _Range):
            items = _resolve(node.path, dot, root)
            if items is None:
                continue
            if isinstance(items, (str, bytes)) or not hasattr(items, "__iter__"):
                raise TemplateError(f"range can't iterate over {node.path!r}")
            for item in items:
                _render(node.body, item, root, out)
        else:
            branch = node.then if _resolve(node.path, dot, root) else node.otherwise
            _render(branch, dot, root, out)


class Template:
    """A parsed template; parse once and render many times."""

    def __init__(self, source: str):
        self.source = source
        self._nodes = _Parser(_tokenize(source), source).parse()

    def render(self, context: Mapping[str, Any]) -> str:
        out: list[str] = []
        _render(self._nodes, context, context, out)
        return "".join(out)


def render_template(source: str, context: Mapping[str, Any]) -> str:
    """Parse and render ``source`` in one go.

    Raises:
        TemplateError: unsupported syntax or a missing key.
    """
    if "{{" not in source:
        return source
    return Template(source).render(context)
