# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for Workshop FinSight.

This module defines a Period value object, a fail-soft date parser for the
raw date values stored on sales, services, contracts and payments, and
helpers to derive reporting periods (current month, month to date, last
month, year to date, today, custom range) from CLI arguments.

Periods are inclusive at day granularity: a moment belongs to a Period when
it falls between the start of its first day and the end of its last day.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd


@dataclass(frozen=True)
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str

    def contains(self, moment: Optional[datetime]) -> bool:
        """True if moment falls within [start_of_day(start), end_of_day(end)]."""
        if moment is None:
            return False
        return self.start <= moment.date() <= self.end


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def parse_moment(value: Any, tz: str = "UTC") -> Optional[datetime]:
    """
    Parse a raw date value into a naive datetime, or return None.

    Accepted inputs are ISO-8601 strings (date only or date-time, with or
    without offset), ``date``/``datetime`` objects and pandas timestamps.
    Timezone-aware values are converted to the reporting timezone ``tz``
    and made naive, so their calendar day is the local one. Naive values
    are taken as local wall-clock time.

    Any other input, an empty value or an unparseable string yields None:
    callers treat such records as "not in range" rather than failing.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        ts = pd.Timestamp(value)
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            ts = pd.to_datetime(text, errors="coerce")
        except (TypeError, ValueError, OverflowError):
            # Mixed-offset or out-of-bounds strings can still raise.
            return None
    else:
        return None

    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(tz).tz_localize(None)
    return ts.to_pydatetime()


def parse_day(value: Any, tz: str = "UTC") -> Optional[date]:
    """Like parse_moment, but return only the calendar day."""
    moment = parse_moment(value, tz)
    return moment.date() if moment is not None else None


def period_month(today: Optional[date] = None) -> Period:
    """Full current calendar month (the default reporting window)."""
    today = today or _today()
    start = today.replace(day=1)
    end = today.replace(day=monthrange(today.year, today.month)[1])
    return Period(start=start, end=end, label=f"Month {start:%Y-%m}")


def period_mtd(today: Optional[date] = None) -> Period:
    """Month-to-date."""
    today = today or _today()
    return Period(start=today.replace(day=1), end=today, label="Month to date")


def period_last_month(today: Optional[date] = None) -> Period:
    """Full previous calendar month."""
    today = today or _today()

    if today.month == 1:
        year = today.year - 1
        month = 12
    else:
        year = today.year
        month = today.month - 1

    start = date(year, month, 1)
    end = date(year, month, monthrange(year, month)[1])
    return Period(start=start, end=end, label="Last month")


def period_ytd(today: Optional[date] = None) -> Period:
    """Calendar year-to-date."""
    today = today or _today()
    return Period(start=date(today.year, 1, 1), end=today, label="Year to date")


def period_today(today: Optional[date] = None) -> Period:
    """Single-day period for today."""
    today = today or _today()
    return Period(start=today, end=today, label=f"Day {today.isoformat()}")


def period_custom(start: date, end: Optional[date] = None) -> Period:
    """
    Custom period. A missing end date means a single-day period.

    Raises:
        ValueError: if end is before start.
    """
    end = end or start
    if end < start:
        raise ValueError("Custom period end date cannot be before start date.")
    return Period(start=start, end=end, label=f"Custom period ({start} → {end})")


PREDEFINED_PERIODS = {
    "month": period_month,
    "mtd": period_mtd,
    "last-month": period_last_month,
    "ytd": period_ytd,
    "today": period_today,
}


def determine_period_from_args(args, today: Optional[date] = None) -> Period:
    """
    Determine the reporting period to use based on CLI args.

    Priority (highest to lowest):

        1. args.period (month, mtd, last-month, ytd, today)
        2. args.from_date / args.to_date (custom period)
        3. current calendar month by default

    Raises:
        ValueError: for an unknown period name, an invalid date or an
            inverted custom range.
    """
    today = today or _today()

    # 1) Predefined period wins over everything else
    p = getattr(args, "period", None)
    if p:
        builder = PREDEFINED_PERIODS.get(p)
        if builder is None:
            raise ValueError(f"Unknown period: {p!r}")
        return builder(today)

    # 2) Custom from/to dates
    from_raw: Optional[str] = getattr(args, "from_date", None)
    to_raw: Optional[str] = getattr(args, "to_date", None)

    if from_raw or to_raw:
        try:
            start = date.fromisoformat(from_raw) if from_raw else None
            end = date.fromisoformat(to_raw) if to_raw else None
        except ValueError as exc:
            raise ValueError("Invalid period dates, expected YYYY-MM-DD.") from exc

        if start is None:
            # Only an end date: from the first day of that month.
            start = end.replace(day=1)
        return period_custom(start, end)

    # 3) Default: current calendar month
    return period_month(today)
