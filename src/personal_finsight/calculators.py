# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Named calculators built on top of the growth formulas.

Each calculator validates its named parameters, calls the matching function
from ``growth.py`` and derives a user-facing breakdown:

- ``sip``      : recurring monthly contribution (ordinary annuity),
- ``lumpsum``  : single upfront investment compounded annually,
- ``fd``       : fixed deposit; identical to ``lumpsum`` with annual
                 compounding, optionally compounded 2, 4 or 12 times a year,
- ``emi``      : loan installment with total interest and total payment,
- ``cagr``     : annualized growth between two values,
- ``emergency_fund``: progress towards N months of expenses.

``amortization_schedule`` and ``yearly_amortization`` expand an EMI into a
month-by-month (pandas) table and its yearly roll-up.

Rounding
--------
Currency results are rounded to 2 decimals. ``total_returns`` is computed
from the rounded future value and invested amount so that
``invested_amount + total_returns == future_value`` holds to the cent.
"""

import math
from datetime import date
from typing import Optional

import pandas as pd
import structlog

from .errors import InvalidInput
from .growth import (
    compound_annual_growth_rate,
    emi_amount,
    future_value_compounded,
    future_value_lumpsum,
    future_value_series,
)
from .models import CalculatorResult, EmergencyFundPlan, EmiResult
from .rounding import round_half_up, to_cents
from .validation import annual_rate, non_negative, positive_whole

logger = structlog.get_logger(__name__)

# Compounding frequencies offered for fixed deposits (times per year).
FD_COMPOUNDING_CHOICES: tuple[int, ...] = (1, 2, 4, 12)


def _resolve_months(months: Optional[int], years: Optional[int]) -> int:
    """Return a month count from exactly one of ``months`` / ``years``."""
    if (months is None) == (years is None):
        raise InvalidInput("months", "provide exactly one of months or years")
    if months is not None:
        return positive_whole("months", months)
    return positive_whole("years", years) * 12


def _breakdown(
    invested: float, future_value: float, annual_rate_percent: float
) -> CalculatorResult:
    fv = to_cents(future_value)
    invested_c = to_cents(invested)
    returns = to_cents(fv - invested_c)
    if returns < 0 and annual_rate_percent >= 0:
        # Non-negative growth cannot lose money; only float noise gets here.
        returns = 0.0
        fv = invested_c
    return CalculatorResult(
        invested_amount=invested_c,
        total_returns=returns,
        future_value=fv,
    )


def sip(
    monthly_contribution: float,
    annual_rate_percent: float,
    years: Optional[int] = None,
    months: Optional[int] = None,
) -> CalculatorResult:
    """
    Project a Systematic Investment Plan.

    Args:
        monthly_contribution: Amount invested at the end of every month.
        annual_rate_percent: Expected annual return, in percent.
        years: Duration in whole years (mutually exclusive with ``months``).
        months: Duration in months (mutually exclusive with ``years``).

    Returns:
        A CalculatorResult where ``invested_amount`` is the sum of all
        contributions made.
    """
    n = _resolve_months(months, years)
    fv = future_value_series(monthly_contribution, annual_rate_percent, n)
    result = _breakdown(monthly_contribution * n, fv, annual_rate_percent)
    logger.debug(
        "calculator.projected", calculator="sip", months=n, **result.to_dict()
    )
    return result


def lumpsum(
    principal: float, annual_rate_percent: float, years: float
) -> CalculatorResult:
    """Project a single upfront investment compounded annually."""
    fv = future_value_lumpsum(principal, annual_rate_percent, years)
    result = _breakdown(principal, fv, annual_rate_percent)
    logger.debug(
        "calculator.projected",
        calculator="lumpsum",
        years=years,
        **result.to_dict(),
    )
    return result


def fd(
    principal: float,
    annual_rate_percent: float,
    years: float,
    compounding_per_year: int = 1,
) -> CalculatorResult:
    """
    Project a fixed deposit.

    With the default annual compounding this is the lumpsum projection.
    ``compounding_per_year`` may be 1, 2, 4 (quarterly) or 12 (monthly).
    """
    if compounding_per_year not in FD_COMPOUNDING_CHOICES:
        raise InvalidInput("compoundingPerYear", "must be one of 1, 2, 4, 12")
    fv = future_value_compounded(
        principal, annual_rate_percent, years, compounding_per_year
    )
    result = _breakdown(principal, fv, annual_rate_percent)
    logger.debug(
        "calculator.projected",
        calculator="fd",
        years=years,
        compounding_per_year=compounding_per_year,
        **result.to_dict(),
    )
    return result


def emi(
    principal: float,
    annual_rate_percent: float,
    months: Optional[int] = None,
    years: Optional[int] = None,
) -> EmiResult:
    """
    Compute the monthly installment of a loan and its total cost.

    ``total_payment = emi * months`` and
    ``total_interest_payable = total_payment - principal``.
    """
    n = _resolve_months(months, years)
    installment = emi_amount(principal, annual_rate_percent, n)
    total_payment = installment * n
    result = EmiResult(
        principal=to_cents(principal),
        emi=to_cents(installment),
        months=n,
        total_interest_payable=to_cents(total_payment - principal),
        total_payment=to_cents(total_payment),
    )
    logger.debug("calculator.projected", calculator="emi", **result.to_dict())
    return result


def cagr(initial_value: float, final_value: float, years: float) -> float:
    """Compound annual growth rate in percent, rounded to 2 decimals."""
    return round_half_up(
        compound_annual_growth_rate(initial_value, final_value, years), 2
    )


def emergency_fund(
    monthly_expenses: float,
    months_of_coverage: int,
    current_savings: float,
) -> EmergencyFundPlan:
    """
    Measure progress towards an emergency fund of ``months_of_coverage``
    months of expenses.

    The suggested monthly contribution closes the remaining gap in a year.
    """
    expenses = non_negative("monthlyExpenses", monthly_expenses)
    months = positive_whole("monthsOfCoverage", months_of_coverage)
    savings = non_negative("currentSavings", current_savings)

    target = expenses * months
    if target == 0:
        progress = 100.0
    else:
        progress = min(savings / target * 100, 100.0)
    remaining = max(target - savings, 0.0)

    if progress >= 100:
        status = "healthy"
    elif progress < 50:
        status = "at_risk"
    else:
        status = "building"

    return EmergencyFundPlan(
        target_fund=to_cents(target),
        current_savings=to_cents(savings),
        progress_percent=round_half_up(progress, 1),
        remaining=to_cents(remaining),
        suggested_monthly_contribution=float(math.ceil(remaining / 12)),
        status=status,
    )


def _add_months(start: date, offset: int) -> date:
    """Return the first day of the month ``offset`` months after ``start``."""
    index = start.year * 12 + (start.month - 1) + offset
    return date(index // 12, index % 12 + 1, 1)


def amortization_schedule(
    principal: float,
    annual_rate_percent: float,
    months: int,
    start_date: Optional[date] = None,
) -> pd.DataFrame:
    """
    Build the month-by-month amortization table of a loan.

    Columns:
        month, date, opening_balance, emi, principal_component,
        interest_component, closing_balance, cumulative_principal,
        cumulative_interest

    ``date`` holds a 'Mon YYYY' label when ``start_date`` is given and is
    empty otherwise. The closing balance never goes below zero.
    """
    p = non_negative("principal", principal)
    rate = annual_rate("annualRatePercent", annual_rate_percent)
    n = positive_whole("months", months)

    installment = emi_amount(p, rate, n)
    monthly_rate = rate / 100 / 12

    rows: list[dict[str, object]] = []
    balance = p
    cumulative_principal = 0.0
    cumulative_interest = 0.0

    for month in range(1, n + 1):
        interest_component = balance * monthly_rate
        principal_component = installment - interest_component
        closing = max(0.0, balance - principal_component)

        cumulative_principal += principal_component
        cumulative_interest += interest_component

        label = ""
        if start_date is not None:
            label = _add_months(start_date, month - 1).strftime("%b %Y")

        rows.append(
            {
                "month": month,
                "date": label,
                "opening_balance": to_cents(balance),
                "emi": to_cents(installment),
                "principal_component": to_cents(principal_component),
                "interest_component": to_cents(interest_component),
                "closing_balance": to_cents(closing),
                "cumulative_principal": to_cents(cumulative_principal),
                "cumulative_interest": to_cents(cumulative_interest),
            }
        )
        balance = closing

    return pd.DataFrame(rows)


def yearly_amortization(schedule: pd.DataFrame) -> pd.DataFrame:
    """
    Roll a monthly amortization schedule up to loan years.

    Returns one row per year with the principal and interest paid during that
    year and the closing balance at its last installment.
    """
    if schedule.empty:
        return pd.DataFrame(columns=["year", "principal", "interest", "balance"])

    df = schedule.assign(year=(schedule["month"] - 1) // 12 + 1)
    out = (
        df.groupby("year", sort=True)
        .agg(
            principal=("principal_component", "sum"),
            interest=("interest_component", "sum"),
            balance=("closing_balance", "last"),
        )
        .reset_index()
    )
    for column in ("principal", "interest"):
        out[column] = out[column].map(to_cents)
    return out
