# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for Branch Cashflow.

This module defines a Period value object and helpers to derive reporting
windows (trailing 3/6/12 months, custom date range, single calendar month,
calendar year) and to filter transaction frames to a window.

Rolling windows start on the first day of the month N months before the
current month and end today, so the current partial month is included.
"""

import logging
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

import pandas as pd

logger = logging.getLogger(__name__)

ROLLING_WINDOWS: dict[str, int] = {
    "3months": 3,
    "6months": 6,
    "1year": 12,
}

DEFAULT_SELECTOR = "6months"

PERIOD_CHOICES: tuple[str, ...] = (*ROLLING_WINDOWS, "custom")


@dataclass
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Return (year, month) moved by `delta` months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def period_rolling(months: int, today: Optional[date] = None) -> Period:
    """Trailing window: first day of the month `months` back, through today."""
    if months < 1:
        raise ValueError("A rolling window needs at least one month.")
    today = today or _today()
    year, month = _shift_month(today.year, today.month, -months)
    label = "Last 12 months" if months == 12 else f"Last {months} months"
    return Period(start=date(year, month, 1), end=today, label=label)


def period_custom(start: date, end: date) -> Period:
    """Explicit date range, inclusive on both ends."""
    if end < start:
        raise ValueError("Custom period end date cannot be before start date.")
    return Period(start=start, end=end, label=f"Custom period ({start} → {end})")


def period_month(year: int, month: int) -> Period:
    """One full calendar month."""
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month!r}")
    last_day = monthrange(year, month)[1]
    start = date(year, month, 1)
    return Period(
        start=start,
        end=date(year, month, last_day),
        label=start.strftime("%B %Y"),
    )


def period_year(year: int) -> Period:
    """One full calendar year."""
    return Period(start=date(year, 1, 1), end=date(year, 12, 31), label=str(year))


def determine_period(
    selector: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    today: Optional[date] = None,
) -> Period:
    """
    Resolve a period selector into a Period.

    Parameters
    ----------
    selector:
        One of "3months", "6months", "1year" or "custom".
    start, end:
        Bounds used by the "custom" selector.
    today:
        Reference date for rolling windows (defaults to the current date).

    Notes
    -----
    A "custom" selector with a missing bound does not raise: it falls back to
    the default rolling window, mirroring what the dashboard does while the
    user is still picking dates.
    """
    if selector == "custom":
        if start is not None and end is not None:
            return period_custom(start, end)
        logger.warning(
            "Custom period requested without both bounds; using the default "
            "%s window instead.",
            DEFAULT_SELECTOR,
        )
        return period_rolling(ROLLING_WINDOWS[DEFAULT_SELECTOR], today)

    if selector in ROLLING_WINDOWS:
        return period_rolling(ROLLING_WINDOWS[selector], today)

    raise ValueError(f"Unknown period: {selector!r}")


def determine_period_from_args(
    args,
    default_selector: str = DEFAULT_SELECTOR,
) -> Period:
    """
    Determine the reporting period to use based on CLI args.

    Priority (highest to lowest):

        1. args.month / args.year (single calendar month, or a full year
           when only --year is given)
        2. args.from_date / args.to_date (custom period)
        3. args.period (3months, 6months, 1year)
        4. the configured default selector
    """
    month: Optional[int] = getattr(args, "month", None)
    year: Optional[int] = getattr(args, "year", None)
    if month is not None or year is not None:
        year = year if year is not None else _today().year
        if month is None:
            return period_year(year)
        return period_month(year, month)

    from_raw: Optional[str] = getattr(args, "from_date", None)
    to_raw: Optional[str] = getattr(args, "to_date", None)
    if from_raw or to_raw:
        start = date.fromisoformat(from_raw) if from_raw else None
        end = date.fromisoformat(to_raw) if to_raw else None
        return determine_period("custom", start, end)

    selector = getattr(args, "period", None) or default_selector
    return determine_period(selector)


def filter_transactions_by_period(
    transactions: pd.DataFrame,
    period: Period,
) -> pd.DataFrame:
    """
    Filter a transaction DataFrame to keep only rows within the period.

    The `transactions` DataFrame is expected to contain a 'date' column of
    type datetime64[ns]. Both bounds are inclusive and compared on calendar
    dates: any time-of-day on the end date is kept.

    Returns
    -------
    pandas.DataFrame
        Filtered copy of the input.
    """
    if transactions.empty:
        return transactions.copy()

    start = pd.Timestamp(period.start)
    end_exclusive = pd.Timestamp(period.end) + pd.Timedelta(days=1)
    mask = (transactions["date"] >= start) & (transactions["date"] < end_exclusive)
    return transactions.loc[mask].copy()
