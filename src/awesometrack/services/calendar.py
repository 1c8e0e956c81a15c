"""Day and ISO-week identifiers used to group content chronologically.

A day number is the integer ``YYYYMMDD`` of a UTC calendar date. A week number
is ``YYYYWW`` where the week is counted the ISO way: the Thursday of a
Monday-start week decides which year owns the week.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from awesometrack.util.formatting import add_zero, to_utc_datetime

MONDAY = 1
THURSDAY = 4
DAYS_PER_WEEK = 7
WEEK = timedelta(days=DAYS_PER_WEEK)


class InvalidDate(ValueError):
    """Raised when a day or week number does not decode to a real date."""


@dataclass(frozen=True)
class DayInfo:
    """Read-only view of a day number."""

    year: int
    month: int
    day: int
    number: int
    id: str
    name: str
    path: str
    date: date


@dataclass(frozen=True)
class WeekOfYear:
    """Read-only view of a week number; `date` is the Monday opening the week."""

    year: int
    week: int
    number: int
    id: str
    name: str
    path: str
    date: date


def utc_date(value: date | datetime) -> date:
    """Floor `value` to its UTC calendar date."""
    return to_utc_datetime(value).date()


def day_number(value: date | datetime) -> int:
    """Encode the UTC calendar date of `value` as ``YYYYMMDD``."""
    day = utc_date(value)
    return day.year * 10000 + day.month * 100 + day.day


def parse_day_number(number: int) -> DayInfo:
    """Decode a ``YYYYMMDD`` integer, raising `InvalidDate` for impossible dates."""

    year, rest = divmod(number, 10000)
    month, day_of_month = divmod(rest, 100)
    try:
        day = date(year, month, day_of_month)
    except ValueError as exc:
        raise InvalidDate(f"Day number {number} is not a valid date.") from exc

    return DayInfo(
        year=year,
        month=month,
        day=day_of_month,
        number=number,
        id=f"{year}-{add_zero(month)}-{add_zero(day_of_month)}",
        name=f"{day:%b} {add_zero(day_of_month)}, {year}",
        path=f"{year}/{add_zero(month)}/{add_zero(day_of_month)}",
        date=day,
    )


def _iso_weekday(day: date) -> int:
    # Monday=1 .. Sunday=7.
    weekday = day.isoweekday() % DAYS_PER_WEEK
    return DAYS_PER_WEEK if weekday == 0 else weekday


def start_date_of_week(value: date | datetime, start_day: int = MONDAY) -> date:
    """Return the first day of the week containing `value`.

    `start_day` uses Sunday=0 .. Saturday=6; weeks begin on Monday by default.
    """

    day = utc_date(value)
    weekday = day.isoweekday() % DAYS_PER_WEEK
    difference = weekday - start_day if weekday >= start_day else weekday - start_day + 7
    return day - timedelta(days=difference)


def week_number(value: date | datetime) -> int:
    """Return the ``YYYYWW`` week number of `value`."""

    year, week = _owning_year_and_week(utc_date(value))
    return year * 100 + week


def _owning_year_and_week(day: date) -> tuple[int, int]:
    thursday = day + timedelta(days=THURSDAY - _iso_weekday(day))
    year_start = date(thursday.year, 1, 1)
    elapsed = thursday - year_start + timedelta(days=1)
    return thursday.year, math.ceil(elapsed / WEEK)


def weeks_in_year(year: int) -> int:
    """Return 53 for long ISO years, 52 otherwise."""
    # Dec 28 always falls in the last week of its own year.
    return _owning_year_and_week(date(year, 12, 28))[1]


def _first_week_monday(year: int) -> date:
    year_start = date(year, 1, 1)
    monday = start_date_of_week(year_start)
    # Jan 1 on Friday, Saturday or Sunday belongs to the previous year's last week.
    if _iso_weekday(year_start) > THURSDAY:
        monday += WEEK
    return monday


def _split_week_number(number: int) -> tuple[int, int]:
    year, week = divmod(number, 100)
    if year < 1 or not 1 <= week <= weeks_in_year(year):
        raise InvalidDate(f"Week number {number} is not a valid ISO week.")
    return year, week


def week_number_to_date(number: int) -> date:
    """Return the Monday that opens week `number`."""

    year, week = _split_week_number(number)
    return _first_week_monday(year) + WEEK * (week - 1)


def week_range_label(number: int) -> str:
    """Format week `number` as ``"Mon DD - Mon DD, YYYY"``.

    The trailing year is the calendar year of the Monday, which differs from the
    owning year for weeks that start in late December.
    """

    monday = week_number_to_date(number)
    sunday = monday + timedelta(days=DAYS_PER_WEEK - 1)
    return f"{monday:%b} {add_zero(monday.day)} - {sunday:%b} {add_zero(sunday.day)}, {monday.year}"


def parse_week_number(number: int) -> WeekOfYear:
    """Decode a ``YYYYWW`` integer, raising `InvalidDate` for impossible weeks."""

    year, week = _split_week_number(number)
    return WeekOfYear(
        year=year,
        week=week,
        number=number,
        id=f"{year}-{week}",
        name=week_range_label(number),
        path=f"{year}/{week}",
        date=week_number_to_date(number),
    )


def week_of_year(value: date | datetime) -> WeekOfYear:
    """Return the week view for the week containing `value`."""
    return parse_week_number(week_number(value))


__all__ = [
    "DayInfo",
    "InvalidDate",
    "WeekOfYear",
    "day_number",
    "parse_day_number",
    "parse_week_number",
    "start_date_of_week",
    "utc_date",
    "week_number",
    "week_number_to_date",
    "week_of_year",
    "week_range_label",
    "weeks_in_year",
]
