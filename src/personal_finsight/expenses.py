# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Expense aggregation for Personal FinSight.

This module reduces raw, dated expense records into the aggregates the
advice engine consumes:

- ``monthly_category_totals``: per-category totals for the calendar month
  containing a reference date, largest first,
- ``monthly_totals``: one total per calendar month over a trailing window,
  oldest first (the snapshot's expense history),
- ``trend``: direction and size of the last month-over-month change,
- ``build_snapshot``: assemble a FinancialSnapshot from raw records plus the
  caller-supplied aggregates (income, savings, investments, profile).

Input formats
-------------
Expense records may be supplied as:

1) a pandas DataFrame with columns ``date``, ``amount`` and optionally
   ``category`` / ``description`` (case-insensitive),
2) an iterable of mappings with the same keys,
3) an iterable of ``(date, amount)`` or ``(date, amount, category)`` tuples.

``read_expenses`` loads the same columns from a CSV file (``label`` is
accepted as an alias for ``description``).

Everything is normalized by ``normalize_expenses`` into a DataFrame with:

    - ``date``        (datetime64[ns], NaT when missing)
    - ``amount``      (float, missing amounts count as 0)
    - ``category``    (str, missing or blank categories become "Other")
    - ``description`` (str)
"""

import os
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Any, Optional, Union

import pandas as pd
import structlog

from .errors import InvalidInput
from .models import (
    CategoryAmount,
    FinancialSnapshot,
    MarketContext,
    PeriodInput,
    PeriodTotal,
    RiskLevel,
    Trend,
    to_period_total,
)
from .periods import filter_expenses_by_period, month_period, trailing_months
from .rounding import round_half_up, to_cents

logger = structlog.get_logger(__name__)

DEFAULT_CATEGORY = "Other"
EXPENSE_COLUMNS = ["date", "amount", "category", "description"]

ExpenseRecords = Union[pd.DataFrame, Iterable[Any]]


def _records_to_frame(records: Iterable[Any]) -> pd.DataFrame:
    """Turn an iterable of mappings or tuples into a raw DataFrame."""
    rows: list[dict[str, Any]] = []
    for index, record in enumerate(records):
        if isinstance(record, Mapping):
            rows.append({str(k).lower().strip(): v for k, v in record.items()})
        elif isinstance(record, Sequence) and not isinstance(record, str):
            if len(record) not in (2, 3):
                raise InvalidInput(
                    f"expenses[{index}]", "must be (date, amount[, category])"
                )
            row = {"date": record[0], "amount": record[1]}
            if len(record) == 3:
                row["category"] = record[2]
            rows.append(row)
        else:
            raise InvalidInput(
                f"expenses[{index}]", "must be a mapping or a (date, amount) tuple"
            )
    return pd.DataFrame(rows)


def normalize_expenses(expenses: ExpenseRecords) -> pd.DataFrame:
    """
    Normalize expense records into the canonical DataFrame layout.

    Returns
    -------
    pandas.DataFrame
        Columns: date, amount, category, description (see module docstring).

    Raises
    ------
    InvalidInput
        If an amount is not numeric or a date cannot be parsed.
    """
    if isinstance(expenses, pd.DataFrame):
        df = expenses.copy()
        df.columns = [str(c).lower().strip() for c in df.columns]
    else:
        df = _records_to_frame(expenses)

    if "label" in df.columns and "description" not in df.columns:
        df = df.rename(columns={"label": "description"})

    for col in EXPENSE_COLUMNS:
        if col not in df.columns:
            df[col] = None

    out = df[EXPENSE_COLUMNS].copy()

    # Amounts: missing -> 0, anything that is present but not numeric fails.
    raw_amounts = out["amount"]
    if raw_amounts.map(lambda v: isinstance(v, bool)).any():
        raise InvalidInput("amount", "must be a number")
    amounts = pd.to_numeric(raw_amounts, errors="coerce")
    if (amounts.isna() & raw_amounts.notna()).any():
        raise InvalidInput("amount", "must be a number")
    out["amount"] = amounts.fillna(0.0).astype(float)

    try:
        dates = pd.to_datetime(out["date"], errors="raise")
    except (TypeError, ValueError) as exc:
        raise InvalidInput("date", "must be a valid date") from exc
    if getattr(dates.dt, "tz", None) is not None:
        dates = dates.dt.tz_localize(None)
    out["date"] = dates

    categories = out["category"].map(
        lambda v: DEFAULT_CATEGORY if v is None or pd.isna(v) else str(v).strip()
    )
    out["category"] = categories.replace("", DEFAULT_CATEGORY)
    out["description"] = out["description"].map(
        lambda v: "" if v is None or pd.isna(v) else str(v)
    )

    return out.reset_index(drop=True)


def read_expenses(path: Union[str, "os.PathLike[str]"]) -> pd.DataFrame:
    """
    Read expense records from a CSV file and normalize them.

    The CSV must contain at least ``date`` and ``amount`` columns
    (case-insensitive). ``category`` and ``description``/``label`` are
    optional.

    Raises
    ------
    ValueError
        If the required columns are missing or values cannot be parsed.
    """
    df = pd.read_csv(path)
    df.columns = [str(c).lower().strip() for c in df.columns]

    missing = {"date", "amount"} - set(df.columns)
    if missing:
        raise ValueError(
            "Invalid expenses file structure. Expected at least the columns:\n"
            "  date, amount[, category, description]\n"
            f"(missing: {', '.join(sorted(missing))})."
        )

    return normalize_expenses(df)


def monthly_category_totals(
    expenses: ExpenseRecords, reference_date: Optional[date] = None
) -> list[CategoryAmount]:
    """
    Sum expenses by category for the calendar month containing
    ``reference_date`` (today when omitted).

    Records without a date belong to no month and are left out. The result
    is sorted by descending amount; equal amounts keep the order in which their category
    was first seen. An empty window returns an empty list.
    """
    df = normalize_expenses(expenses)
    period = month_period(reference_date)
    window = filter_expenses_by_period(df, period)

    if window.empty:
        logger.debug("expenses.aggregated", period=period.label, categories=0)
        return []

    # groupby(sort=False) keeps first-seen order; sorted() is stable.
    totals = window.groupby("category", sort=False)["amount"].sum()
    ranked = sorted(totals.items(), key=lambda item: -item[1])

    result = [
        CategoryAmount(category=str(name), amount=to_cents(float(amount)))
        for name, amount in ranked
    ]
    logger.debug(
        "expenses.aggregated",
        period=period.label,
        records=len(window),
        categories=len(result),
    )
    return result


def monthly_totals(
    expenses: ExpenseRecords,
    reference_date: Optional[date] = None,
    months: int = 6,
) -> list[PeriodTotal]:
    """
    Total spending per calendar month for the ``months`` months ending with
    the month of ``reference_date``, oldest first.

    Months without records are reported with a total of 0. Undated records
    are ignored here since they cannot be placed in a given month.
    """
    if isinstance(months, bool) or not isinstance(months, int) or months <= 0:
        raise InvalidInput("months", "must be a positive whole number")

    df = normalize_expenses(expenses)
    series: list[PeriodTotal] = []
    for period in trailing_months(reference_date, months):
        window = filter_expenses_by_period(df, period)
        series.append(
            PeriodTotal(
                label=period.label,
                total=to_cents(float(window["amount"].sum())),
            )
        )
    return series


def trend(series: Sequence[PeriodInput]) -> Optional[Trend]:
    """
    Describe the change between the last two points of a chronological
    ``(label, total)`` series.

    ``change_percent = (last - previous) / previous * 100``, rounded half-up
    to one decimal. The direction is 'up' when the rounded change is
    positive, 'down' when negative and 'flat' otherwise.

    Returns None (not an error) when fewer than two points are available or
    when the previous total is 0, since the change is then indeterminate.
    """
    points = [to_period_total(i, item) for i, item in enumerate(series)]
    if len(points) < 2:
        return None

    previous = points[-2].total
    last = points[-1].total
    if previous == 0:
        return None

    change = round_half_up((last - previous) / previous * 100, 1)
    if change > 0:
        direction = "up"
    elif change < 0:
        direction = "down"
    else:
        direction = "flat"
    return Trend(direction=direction, change_percent=change)


def build_snapshot(
    expenses: ExpenseRecords,
    *,
    age: int,
    monthly_income: float,
    monthly_savings: float,
    risk_tolerance: Union[RiskLevel, str],
    existing_investments: float = 0.0,
    income_stability: Union[RiskLevel, str] = RiskLevel.MEDIUM,
    reference_date: Optional[date] = None,
    history_months: int = 6,
    market: Optional[MarketContext] = None,
) -> FinancialSnapshot:
    """
    Assemble a FinancialSnapshot from raw expense records.

    The category breakdown covers the calendar month of ``reference_date``
    and the expense history covers the ``history_months`` months ending with
    it. Income, savings and investments are taken as supplied.
    """
    df = normalize_expenses(expenses)
    return FinancialSnapshot(
        age=age,
        monthly_income=monthly_income,
        monthly_savings=monthly_savings,
        risk_tolerance=risk_tolerance,
        monthly_expense_categories=monthly_category_totals(df, reference_date),
        existing_investments=existing_investments,
        expense_history=monthly_totals(df, reference_date, history_months),
        income_stability=income_stability,
        market=market,
    )
