"""Small formatting helpers shared by the calendar, paths and CLI layers."""

from __future__ import annotations

import re
from datetime import UTC, date, datetime

_COMPACT_SUFFIXES = ("", "K", "M", "B", "T")
_SLUG_HTML_TAGS = re.compile(r"<[!/a-z].*?>", re.IGNORECASE)
_SLUG_PUNCTUATION = re.compile(
    r"[\u2000-\u206F\u2E00-\u2E7F\\'!\"#$%&()*+,./:;<=>?@\[\]^`{|}~]"
)
_WORD_SPLIT = re.compile(r"[\s_\-]+")


def add_zero(num: int) -> str:
    """Left-pad a non-negative number below ten with a single zero."""
    if num < 10:
        return f"0{num}"
    return str(num)


def to_utc_datetime(value: date | datetime) -> datetime:
    """Return `value` as an aware UTC datetime; naive values are taken as UTC."""

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    return datetime(value.year, value.month, value.day, tzinfo=UTC)


def full_year(value: date | datetime) -> str:
    return str(to_utc_datetime(value).year)


def full_month(value: date | datetime) -> str:
    return add_zero(to_utc_datetime(value).month)


def full_day(value: date | datetime) -> str:
    return add_zero(to_utc_datetime(value).day)


def utc_day(value: date | datetime) -> str:
    """Return the UTC calendar day as ``YYYY-MM-DD``."""
    return f"{full_year(value)}-{full_month(value)}-{full_day(value)}"


def format_utc(value: date | datetime, format_string: str) -> str:
    """Format `value` in UTC using strftime directives."""
    return to_utc_datetime(value).strftime(format_string)


def format_human_time(value: date | datetime, *, now: datetime | None = None) -> str:
    """Short date for listings: ``MM/DD`` this year, ``YY/MM/DD`` otherwise."""

    current = now or datetime.now(UTC)
    if format_utc(current, "%Y") == format_utc(value, "%Y"):
        return format_utc(value, "%m/%d")
    return format_utc(value, "%y/%m/%d")


def format_number(num: float) -> str:
    """Compact English notation, e.g. ``999``, ``1.2K``, ``12K``, ``1.5M``."""

    sign = "-" if num < 0 else ""
    value = abs(num)
    tier = 0
    while value >= 1000 and tier < len(_COMPACT_SUFFIXES) - 1:
        value /= 1000
        tier += 1

    rounded = round(value, 1) if value < 10 else float(round(value))
    if rounded >= 1000 and tier < len(_COMPACT_SUFFIXES) - 1:
        rounded = 1.0
        tier += 1

    text = f"{rounded:.1f}".rstrip("0").rstrip(".")
    return f"{sign}{text}{_COMPACT_SUFFIXES[tier]}"


def slugy(value: str) -> str:
    """Markdown heading slug in the style of marked's Slugger."""

    slug = value.lower().strip()
    slug = _SLUG_HTML_TAGS.sub("", slug)
    slug = _SLUG_PUNCTUATION.sub("", slug)
    return re.sub(r"\s", "-", slug)


def title_case(value: str) -> str:
    """Turn identifiers such as ``awesome-python`` into ``Awesome Python``."""

    words = [word for word in _WORD_SPLIT.split(value.strip()) if word]
    return " ".join(word[:1].upper() + word[1:] for word in words)


__all__ = [
    "add_zero",
    "format_human_time",
    "format_number",
    "format_utc",
    "full_day",
    "full_month",
    "full_year",
    "slugy",
    "title_case",
    "to_utc_datetime",
    "utc_day",
]
