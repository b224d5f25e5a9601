"""Relative and fuzzy date parsing for scraped timestamps.

Relative durations ("3 mins ago", "1 week, 2.5 days ago") are subtracted
from a reference time using fixed unit lengths: a year is 365 days, a
month 31 days and a week 7 days. Fractions scale the same constants, so
"0.5 months" is exactly 372 hours.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

# RFC 1123 with numeric zone, the canonical output of every time filter.
TIME_FORMAT = "%a, %d %b %Y %H:%M:%S %z"

_DAY = 86400

_UNIT_SECONDS: dict[str, int] = {
    "year": 365 * _DAY,
    "yr": 365 * _DAY,
    "y": 365 * _DAY,
    "month": 31 * _DAY,
    "mnth": 31 * _DAY,
    "mo": 31 * _DAY,
    "week": 7 * _DAY,
    "wk": 7 * _DAY,
    "w": 7 * _DAY,
    "day": _DAY,
    "d": _DAY,
    "hour": 3600,
    "hr": 3600,
    "h": 3600,
    "minute": 60,
    "min": 60,
    "m": 60,
    "second": 1,
    "sec": 1,
    "s": 1,
}

_TOKEN_RE = re.compile(r"\d+(?:\.\d+)?|[a-z]+|\S")
_NUMBER_RE = re.compile(r"^\d+(?:\.\d+)?$")
_SKIP_TOKENS = frozenset({",", "ago", "and"})

_AGO_RE = re.compile(r"(?i)\bago\b")
# A bare duration without "ago", e.g. "10.5 years" or "3 days".
_BARE_DURATION_RE = re.compile(r"(?i)^\s*\d+(?:\.\d+)?\s*[a-z]+")
_TODAY_RE = re.compile(r"(?i)\btoday([\s,]+|$)")
_TOMORROW_RE = re.compile(r"(?i)\btomorrow([\s,]+|$)")
_YESTERDAY_RE = re.compile(r"(?i)\byesterday([\s,]+|$)")
_MISSING_YEAR_RE = re.compile(r"^(\d{1,2})-(\d{1,2})(?=\s|$)")

_DAY_PREFIX = "%a, %d %b %Y "

# Tried in order after relative words have been expanded.
_FORMATS: tuple[str, ...] = (
    "%a, %d %b %Y %H:%M:%S %z",
    "%a, %d %b %Y %H:%M:%S %Z",
    "%a, %d %b %Y %H:%M:%S",
    "%a, %d %b %Y %H:%M",
    "%a, %d %b %Y %I:%M%p",
    "%a, %d %b %Y %I:%M %p",
    "%a, %d %b %Y",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%m-%d-%Y %H:%M:%S",
    "%m-%d-%Y %H:%M",
    "%m-%d-%y %H:%M",
    "%m-%d-%Y",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%d %b %Y %H:%M:%S",
    "%d %b %Y %H:%M",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d %Y %H:%M",
    "%b %d, %Y %H:%M",
    "%b %d, %Y",
    "%B %d, %Y",
    "%A, %b %d, %Y",
    "%A, %B %d, %Y",
    "%a %b %d %H:%M:%S %Y",
)


def format_time(value: datetime) -> str:
    return value.strftime(TIME_FORMAT)


def normalize_space(value: str) -> str:
    return " ".join(value.split())


def _unit_seconds(unit: str) -> int:
    if unit not in _UNIT_SECONDS and unit != "s" and unit.endswith("s"):
        unit = unit[:-1]
    try:
        return _UNIT_SECONDS[unit]
    except KeyError:
        raise ValueError(f"Unsupported unit of time {unit!r}") from None


def parse_time_ago(src: str, now: datetime) -> datetime:
    """Subtract a (compound) relative duration from ``now``.

    Accepts e.g. "3 mins ago", "57m 7s ago", "1 week, 2.5 days ago" and
    "10.5 years". Raises ValueError on anything else.
    """
    tokens = _TOKEN_RE.findall(normalize_space(src).lower())
    total = 0.0
    consumed = 0
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token in _SKIP_TOKENS:
            i += 1
            continue
        if not _NUMBER_RE.match(token):
            raise ValueError(f"failed to parse decimal time {token!r} in {src!r}")
        if i + 1 >= len(tokens):
            raise ValueError(f"expected a time unit after {token!r} in {src!r}")
        total += float(token) * _unit_seconds(tokens[i + 1])
        consumed += 1
        i += 2

    if not consumed:
        raise ValueError(f"no duration found in {src!r}")
    return now - timedelta(seconds=total)


def _parse_absolute(value: str) -> datetime | None:
    for fmt in _FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def parse_fuzzy_time(src: str, now: datetime) -> datetime:
    """Best-effort parse of the many date shapes trackers print.

    Handles relative durations with or without "ago",
    ``today``/``yesterday``/``tomorrow`` prefixes, month-day dates without
    a year and a list of common absolute formats. Values without a zone are taken as UTC.
    """
    if _AGO_RE.search(src):
        return parse_time_ago(src, now)
    if _BARE_DURATION_RE.match(src):
        try:
            return parse_time_ago(src, now)
        except ValueError:
            pass  # "20 Aug 2016" starts the same way

    out = normalize_space(src)
    out = _TODAY_RE.sub(lambda _: now.strftime(_DAY_PREFIX), out)
    out = _TOMORROW_RE.sub(lambda _: (now + timedelta(days=1)).strftime(_DAY_PREFIX), out)
    out = _YESTERDAY_RE.sub(
        lambda _: (now - timedelta(days=1)).strftime(_DAY_PREFIX), out
    )
    out = _MISSING_YEAR_RE.sub(lambda m: f"{m.group(0)}-{now.year}", out)
    out = out.strip()

    parsed = _parse_absolute(out)
    if parsed is None:
        raise ValueError(f"no matching date format for {src!r}")
    return parsed
