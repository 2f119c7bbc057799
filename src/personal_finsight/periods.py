# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for Personal FinSight.

This module defines a Period value object and helpers to derive the calendar
month windows used by the expense aggregator (current month, trailing N
months) from a reference date.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

import pandas as pd


@dataclass
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def resolve_reference_date(reference_date: Optional[date] = None) -> date:
    """Return ``reference_date`` as a plain date, defaulting to today."""
    if reference_date is None:
        return _today()
    if isinstance(reference_date, datetime):
        return reference_date.date()
    return reference_date


def month_period(reference_date: Optional[date] = None) -> Period:
    """Full calendar month containing ``reference_date`` (today by default)."""
    ref = resolve_reference_date(reference_date)
    start = ref.replace(day=1)
    end = ref.replace(day=monthrange(ref.year, ref.month)[1])
    return Period(start=start, end=end, label=start.strftime("%b %Y"))


def trailing_months(
    reference_date: Optional[date] = None, count: int = 6
) -> list[Period]:
    """
    Return ``count`` consecutive calendar months ending with the month of
    ``reference_date``, oldest first.
    """
    if count <= 0:
        raise ValueError("count must be a positive number of months.")

    ref = resolve_reference_date(reference_date)
    out: list[Period] = []
    for back in range(count - 1, -1, -1):
        index = ref.year * 12 + (ref.month - 1) - back
        out.append(month_period(date(index // 12, index % 12 + 1, 1)))
    return out


def filter_expenses_by_period(expenses: pd.DataFrame, period: Period) -> pd.DataFrame:
    """
    Filter an expenses DataFrame to keep only records within the period.

    The ``expenses`` DataFrame is expected to contain a 'date' column of type
    datetime64[ns] (as produced by ``normalize_expenses``). Both bounds are
    inclusive; times of day on the last day of the period are kept. Records
    without a date (NaT) never fall inside a period and are dropped.

    Parameters
    ----------
    expenses:
        DataFrame with at least a 'date' column.
    period:
        Period defining the [start, end] boundaries (inclusive).

    Returns
    -------
    pandas.DataFrame
        Filtered DataFrame containing only records within the period.
    """
    dates = expenses["date"]
    mask = (dates >= pd.Timestamp(period.start)) & (
        dates < pd.Timestamp(period.end) + pd.Timedelta(days=1)
    )
    return expenses.loc[mask].copy()
