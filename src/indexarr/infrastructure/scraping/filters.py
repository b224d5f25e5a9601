"""Named text filters applied to extracted field values.

Filters are pure functions of ``(args, value, context)``; the reference
time and the logger travel in an explicit :class:`FilterContext` instead
of process-wide state.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable
from urllib.parse import parse_qs, urlsplit

import structlog

from indexarr.domain.definitions import FilterBlock
from indexarr.domain.indexers import FilterError, UnknownFilterError

from .timeparse import format_time, parse_fuzzy_time

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FilterContext:
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    logger: Any = field(default_factory=lambda: log)


# Reference-date layouts ("Mon Jan 2 15:04:05 2006"), as found in existing definition documents.
# Longest tokens first so "2006" wins over "2" and "January" over "Jan".
_LAYOUT_TOKENS: tuple[tuple[str, str], ...] = (
    ("January", "%B"),
    ("Monday", "%A"),
    ("Z07:00", "%z"),
    ("-07:00", "%z"),
    ("-0700", "%z"),
    ("2006", "%Y"),
    ("Jan", "%b"),
    ("Mon", "%a"),
    ("MST", "%Z"),
    ("_2", "%d"),
    ("01", "%m"),
    ("02", "%d"),
    ("03", "%I"),
    ("04", "%M"),
    ("05", "%S"),
    ("06", "%y"),
    ("15", "%H"),
    ("PM", "%p"),
    ("pm", "%p"),
    ("1", "%m"),
    ("2", "%d"),
    ("3", "%I"),
    ("4", "%M"),
    ("5", "%S"),
)


def layout_to_strptime(layout: str) -> str:
    """Translate a reference-date layout ("2006-01-02 15:04:05") to strptime."""
    out: list[str] = []
    i = 0
    while i < len(layout):
        for token, directive in _LAYOUT_TOKENS:
            if layout.startswith(token, i):
                out.append(directive)
                i += len(token)
                break
        else:
            ch = layout[i]
            out.append("%%" if ch == "%" else ch)
            i += 1
    return "".join(out)


def _as_strptime(layout: str) -> str:
    return layout if "%" in layout else layout_to_strptime(layout)


def filter_querystring(param: str, value: str) -> str:
    try:
        query = urlsplit(value).query
    except ValueError as e:
        raise FilterError(f"Unparseable url {value!r}: {e}") from e
    return parse_qs(query, keep_blank_values=True).get(param, [""])[0]


def filter_dateparse(layouts: Iterable[str], value: str) -> str:
    for layout in layouts:
        try:
            parsed = datetime.strptime(value, _as_strptime(layout))
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return format_time(parsed)
    raise FilterError(f"No matching date pattern for {value!r}")


def filter_regexp(pattern: str, value: str) -> str:
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise FilterError(f"Invalid pattern {pattern!r}: {e}") from e

    match = compiled.search(value)
    if match is None:
        raise FilterError(f"No matches found for pattern {pattern!r}")
    if compiled.groups:
        return match.group(1) or ""
    return match.group(0)


def filter_split(sep: str, pos: int, value: str) -> str:
    frags = value.split(sep)
    try:
        return frags[pos]
    except IndexError:
        raise FilterError(
            f"Split position {pos} out of range for {len(frags)} fragments"
        ) from None


def filter_fuzzytime(value: str, now: datetime) -> str:
    try:
        return format_time(parse_fuzzy_time(value, now))
    except ValueError as e:
        raise FilterError(f"error parsing fuzzy time {value!r}: {e}") from e


def _string_arg(name: str, args: Any) -> str:
    if not isinstance(args, str):
        raise FilterError(f"Filter {name!r} requires a string argument")
    return args


def _pair_args(name: str, args: Any) -> tuple[Any, Any]:
    if not isinstance(args, (list, tuple)) or len(args) != 2:
        raise FilterError(f"Filter {name!r} requires a two item list argument")
    return args[0], args[1]


def _dateparse(name: str, args: Any, value: str, ctx: FilterContext) -> str:
    if isinstance(args, str):
        return filter_dateparse([args], value)
    if isinstance(args, (list, tuple)) and all(isinstance(a, str) for a in args):
        return filter_dateparse(args, value)
    raise FilterError(f"Filter {name!r} argument type {type(args).__name__} was invalid")


def _split(name: str, args: Any, value: str, ctx: FilterContext) -> str:
    sep, pos = _pair_args(name, args)
    if not isinstance(sep, str):
        raise FilterError(f"Filter {name!r} requires a string argument at idx 0")
    if isinstance(pos, bool) or not isinstance(pos, int):
        raise FilterError(f"Filter {name!r} requires an int argument at idx 1")
    return filter_split(sep, pos, value)


def _replace(name: str, args: Any, value: str, ctx: FilterContext) -> str:
    old, new = _pair_args(name, args)
    if not isinstance(old, str) or not isinstance(new, str):
        raise FilterError(f"Filter {name!r} requires string arguments")
    return value.replace(old, new)


def _trim(name: str, args: Any, value: str, ctx: FilterContext) -> str:
    if args is None:
        return value.strip()
    return value.strip(_string_arg(name, args))


_FilterFn = Callable[[str, Any, str, FilterContext], str]

_FILTERS: dict[str, _FilterFn] = {
    "querystring": lambda n, a, v, c: filter_querystring(_string_arg(n, a), v),
    "dateparse": _dateparse,
    "timeparse": _dateparse,
    "regexp": lambda n, a, v, c: filter_regexp(_string_arg(n, a), v),
    "split": _split,
    "replace": _replace,
    "trim": _trim,
    "append": lambda n, a, v, c: v + _string_arg(n, a),
    "prepend": lambda n, a, v, c: _string_arg(n, a) + v,
    "timeago": lambda n, a, v, c: filter_fuzzytime(v, c.now),
    "fuzzytime": lambda n, a, v, c: filter_fuzzytime(v, c.now),
    "reltime": lambda n, a, v, c: filter_fuzzytime(v, c.now),
}


def known_filters() -> list[str]:
    return sorted(_FILTERS)


def invoke_filter(name: str, args: Any, value: str, ctx: FilterContext) -> str:
    """Run one filter.

    Raises:
        UnknownFilterError: ``name`` is not a known filter.
        FilterError: bad arguments or input the filter cannot handle.
    """
    fn = _FILTERS.get(name)
    if fn is None:
        raise UnknownFilterError(name)
    return fn(name, args, value, ctx)


def apply_filters(
    value: str, filters: Iterable[FilterBlock], ctx: FilterContext
) -> str:
    """Pipe ``value`` through ``filters`` in order."""
    for f in filters:
        before = value
        value = invoke_filter(f.name, f.args, value, ctx)
        ctx.logger.debug(
            "filter_applied", filter=f.name, args=f.args, before=before, after=value
        )
    return value
