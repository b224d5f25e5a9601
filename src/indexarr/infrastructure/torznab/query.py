"""Wire <-> canonical conversion for Torznab queries."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence, Union
from urllib.parse import urlencode

import structlog

from indexarr.domain.entities import Query, TorznabIncorrectParameter

log = structlog.get_logger(__name__)

WireParams = Union[Mapping[str, Union[str, Sequence[str]]], Iterable[tuple[str, str]]]

_SINGLE_VALUED = ("t", "ep", "season", "apikey", "limit", "offset", "extended")

_BOOL_VALUES = {
    "1": True,
    "t": True,
    "true": True,
    "0": False,
    "f": False,
    "false": False,
}


def _as_multidict(params: WireParams) -> dict[str, list[str]]:
    out: dict[str, list[str]] = {}
    items = params.items() if isinstance(params, Mapping) else params
    for key, value in items:
        if isinstance(value, (list, tuple)):
            out.setdefault(key, []).extend(str(v) for v in value)
        else:
            out.setdefault(key, []).append(str(value))
    return out


def _parse_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise TorznabIncorrectParameter(f"Invalid {key} value {value!r}") from None


def _parse_categories(values: list[str]) -> tuple[int, ...]:
    cats: list[int] = []
    for raw in values:
        for part in raw.split(","):
            try:
                cats.append(int(part))
            except ValueError:
                raise TorznabIncorrectParameter(
                    f"Unable to parse cats {raw!r}"
                ) from None
    return tuple(cats)


def parse_query(params: WireParams) -> Query:
    """Parse Torznab wire parameters into a canonical :class:`Query`.

    ``params`` may be a multi-dict (``{"cat": ["5000", "2000"]}``), a plain
    mapping or a sequence of ``(key, value)`` pairs.

    Raises:
        TorznabIncorrectParameter: repeated single-valued keys or
            malformed numbers, booleans or category lists.
    """
    values = _as_multidict(params)
    fields: dict[str, object] = {}

    for key, vals in values.items():
        if key in _SINGLE_VALUED and len(vals) > 1:
            raise TorznabIncorrectParameter(f"Multiple {key} parameters not allowed")

        if key == "t":
            fields["type"] = vals[0]
        elif key == "q":
            fields["q"] = " ".join(vals)
        elif key in ("ep", "season", "apikey"):
            fields[key] = vals[0]
        elif key in ("limit", "offset"):
            fields[key] = _parse_int(key, vals[0])
        elif key == "extended":
            flag = _BOOL_VALUES.get(vals[0].lower())
            if flag is None:
                raise TorznabIncorrectParameter(f"Invalid extended value {vals[0]!r}")
            fields["extended"] = flag
        elif key == "cat":
            fields["categories"] = _parse_categories(vals)
        else:
            log.debug("torznab_unknown_param", key=key)

    return Query(**fields)  # type: ignore[arg-type]


def encode_query(query: Query) -> str:
    """Render ``query`` back into a URL query string (``t`` defaults to search)."""
    params: list[tuple[str, str]] = [("t", query.type or "search")]
    if query.q:
        params.append(("q", query.q))
    if query.ep:
        params.append(("ep", query.ep))
    if query.season:
        params.append(("season", query.season))
    if query.offset:
        params.append(("offset", str(query.offset)))
    if query.limit:
        params.append(("limit", str(query.limit)))
    if query.extended:
        params.append(("extended", "1"))
    if query.apikey:
        params.append(("apikey", query.apikey))
    if query.categories:
        params.append(("cat", ",".join(str(c) for c in query.categories)))
    return urlencode(params)
