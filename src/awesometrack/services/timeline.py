"""Chronological grouping of tracked items by UTC day and ISO week."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime
from typing import Any

from awesometrack.services.calendar import (
    day_number,
    parse_day_number,
    parse_week_number,
    week_number,
)
from awesometrack.util.formatting import to_utc_datetime
from awesometrack.util.hashing import sha1_hex


def parse_timestamp(value: Any) -> datetime:
    """Return an aware UTC datetime from ISO-8601 text, epoch milliseconds or dates.

    Naive values are taken as UTC.
    """

    if isinstance(value, date):
        return to_utc_datetime(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    if isinstance(value, str):
        return to_utc_datetime(datetime.fromisoformat(value.strip()))
    raise TypeError(f"Unsupported timestamp {value!r}")


def item_key(item: Mapping[str, Any]) -> str:
    """Stable identity for an item: SHA-1 of its markdown (or url)."""
    return sha1_hex(str(item.get("markdown") or item.get("url") or ""))


def index_items(items: Iterable[Mapping[str, Any]]) -> dict[str, dict[str, Any]]:
    """Key items by `item_key`; later duplicates replace earlier ones."""
    return {item_key(item): dict(item) for item in items}


def annotate_items(items: Mapping[str, Mapping[str, Any]] | Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Attach day/week numbers and their views derived from ``updated_at``."""

    members = items.values() if isinstance(items, Mapping) else items
    details: list[dict[str, Any]] = []
    for item in members:
        updated_at = parse_timestamp(item["updated_at"])
        day = day_number(updated_at)
        week = week_number(updated_at)
        details.append(
            {
                **item,
                "updated_day": day,
                "updated_week": week,
                "updated_day_info": parse_day_number(day),
                "updated_week_info": parse_week_number(week),
            }
        )
    return details


def _group(details: list[dict[str, Any]], field: str) -> dict[int, list[dict[str, Any]]]:
    ordered = sorted(details, key=lambda item: parse_timestamp(item["updated_at"]), reverse=True)
    groups: dict[int, list[dict[str, Any]]] = {}
    for item in ordered:
        groups.setdefault(item[field], []).append(item)
    return dict(sorted(groups.items(), reverse=True))


def group_by_day(items: Mapping[str, Mapping[str, Any]] | Iterable[Mapping[str, Any]]) -> dict[int, list[dict[str, Any]]]:
    """Annotated items keyed by day number, newest day and newest item first."""
    return _group(annotate_items(items), "updated_day")


def group_by_week(items: Mapping[str, Mapping[str, Any]] | Iterable[Mapping[str, Any]]) -> dict[int, list[dict[str, Any]]]:
    """Annotated items keyed by week number, newest week and newest item first."""
    return _group(annotate_items(items), "updated_week")


__all__ = [
    "annotate_items",
    "group_by_day",
    "group_by_week",
    "index_items",
    "item_key",
    "parse_timestamp",
]
