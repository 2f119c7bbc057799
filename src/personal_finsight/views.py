# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for Personal FinSight.

This module turns engine results (advice reports, category totals,
projections) into pandas DataFrames ready for console display or CSV export,
and into JSON-ready dictionaries for the ``json`` display mode.

The helpers do not compute anything: rounding of currency amounts happens in
the engine, the ``decimals`` arguments only control presentation.
"""

from typing import Any, Union

import pandas as pd

from .models import (
    AdviceReport,
    AllocationPlan,
    CalculatorResult,
    CategoryAmount,
    EmergencyFundPlan,
    EmiResult,
    PeriodTotal,
)
from .rounding import percent, round_half_up

Projection = Union[CalculatorResult, EmiResult, EmergencyFundPlan]

# Order used when listing actions: High first, Low last.
PRIORITY_ORDER = {"High": 0, "Medium": 1, "Low": 2}


def advice_to_dataframe(
    report: AdviceReport, sort_by_priority: bool = False
) -> pd.DataFrame:
    """
    Convert the action items of an AdviceReport into a DataFrame.

    Columns:
        - rank:      Position of the item in the engine's output (1-based).
        - priority:  High, Medium or Low.
        - title:     Short headline.
        - action:    Suggested next step.
        - timeframe: Expected horizon, empty when not applicable.

    By default rows keep the engine's rule order. With ``sort_by_priority``
    they are sorted High -> Low, keeping rule order within a priority.
    """
    columns = ["rank", "priority", "title", "action", "timeframe"]
    if not report.actions:
        return pd.DataFrame(columns=columns)

    rows: list[dict[str, object]] = []
    for rank, item in enumerate(report.actions, start=1):
        rows.append(
            {
                "rank": rank,
                "priority": item.priority.value,
                "title": item.title,
                "action": item.action,
                "timeframe": item.timeframe or "",
            }
        )

    df = pd.DataFrame(rows)
    if sort_by_priority:
        df["__priority_order__"] = df["priority"].map(PRIORITY_ORDER)
        df = df.sort_values(["__priority_order__", "rank"], kind="stable").drop(
            columns=["__priority_order__"]
        )

    return df[columns].reset_index(drop=True)


def allocation_to_dataframe(allocation: AllocationPlan) -> pd.DataFrame:
    """Return one row per asset class with its percentage."""
    return pd.DataFrame(
        [
            {"asset": "Equity", "percent": allocation.equity},
            {"asset": "Debt", "percent": allocation.debt},
            {"asset": "Gold", "percent": allocation.gold},
            {"asset": "Mutual funds", "percent": allocation.mutual_funds},
        ],
        columns=["asset", "percent"],
    )


def category_totals_to_dataframe(
    categories: list[CategoryAmount], decimals: int = 2
) -> pd.DataFrame:
    """
    Convert category totals into a DataFrame with a share-of-total column.

    Columns: category, amount, share (percent of the listed total, or 0 when
    the total is 0). Row order is preserved.
    """
    if not categories:
        return pd.DataFrame(columns=["category", "amount", "share"])

    total = sum(c.amount for c in categories)
    rows = [
        {
            "category": c.category,
            "amount": round_half_up(c.amount, decimals),
            "share": percent(c.amount, total),
        }
        for c in categories
    ]
    return pd.DataFrame(rows, columns=["category", "amount", "share"])


def history_to_dataframe(
    history: list[PeriodTotal], decimals: int = 2
) -> pd.DataFrame:
    """Convert a monthly expense history into a (period, total) DataFrame."""
    return pd.DataFrame(
        [
            {"period": p.label, "total": round_half_up(p.total, decimals)}
            for p in history
        ],
        columns=["period", "total"],
    )


def projection_to_dataframe(result: Projection, decimals: int = 2) -> pd.DataFrame:
    """
    Convert a calculator result into a two-column (field, value) DataFrame.

    Field names are the public (camelCase) names from ``to_dict()``; numeric
    values are rounded to ``decimals``.
    """
    rows: list[dict[str, object]] = []
    for key, value in result.to_dict().items():
        if isinstance(value, float):
            value = round_half_up(value, decimals)
        rows.append({"field": key, "value": value})
    return pd.DataFrame(rows, columns=["field", "value"])


def report_to_dict(report: AdviceReport) -> dict[str, Any]:
    """JSON-ready representation of an advice report."""
    return report.to_dict()
