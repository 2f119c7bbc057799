# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Closed-form compound-growth functions.

These are the formulas every calculator composes:

- future value of a lumpsum compounded annually,
- future value of a lumpsum compounded ``m`` times per year,
- future value of an ordinary annuity compounded monthly (SIP),
- equated monthly installment of an amortizing loan (EMI),
- compound annual growth rate (CAGR).

All functions are pure. Inputs are validated first and rejected with
``InvalidInput``; zero-rate cases degrade to their linear equivalents instead
of dividing by zero.
"""

import math

from .validation import annual_rate, non_negative, positive, positive_whole


def future_value_lumpsum(
    principal: float, annual_rate_percent: float, years: float
) -> float:
    """Return ``principal * (1 + r) ** years`` with ``r = rate / 100``."""
    p = non_negative("principal", principal)
    rate = annual_rate("annualRatePercent", annual_rate_percent)
    n = positive("years", years)
    return p * (1 + rate / 100) ** n


def future_value_compounded(
    principal: float,
    annual_rate_percent: float,
    years: float,
    periods_per_year: int = 1,
) -> float:
    """
    Future value of a lumpsum compounded ``periods_per_year`` times a year.

    With ``periods_per_year == 1`` this is exactly
    :func:`future_value_lumpsum`.
    """
    p = non_negative("principal", principal)
    rate = annual_rate("annualRatePercent", annual_rate_percent)
    n = positive("years", years)
    m = positive_whole("compoundingPerYear", periods_per_year)
    return p * (1 + rate / 100 / m) ** (m * n)


def _growth_minus_one(r: float, n: int) -> float:
    """Return ``(1 + r) ** n - 1`` without losing tiny rates to cancellation."""
    return math.expm1(n * math.log1p(r))


def future_value_series(
    monthly_contribution: float, annual_rate_percent: float, months: int
) -> float:
    """
    Future value of ``months`` end-of-month contributions (ordinary annuity).

    ``FV = C * ((1 + r) ** n - 1) / r`` with ``r = rate / 100 / 12``.
    A rate too small to grow the balance degrades to ``C * n``.
    """
    c = non_negative("monthlyContribution", monthly_contribution)
    rate = annual_rate("annualRatePercent", annual_rate_percent)
    n = positive_whole("months", months)

    r = rate / 100 / 12
    growth_minus_one = _growth_minus_one(r, n)
    if growth_minus_one == 0:
        return c * n
    return c * growth_minus_one / r


def emi_amount(principal: float, annual_rate_percent: float, months: int) -> float:
    """
    Equated monthly installment that fully amortizes ``principal``.

    ``EMI = P * r * (1 + r) ** n / ((1 + r) ** n - 1)`` with
    ``r = rate / 100 / 12``. A rate too small to accrue interest degrades to
    ``P / n``.
    """
    p = non_negative("principal", principal)
    rate = annual_rate("annualRatePercent", annual_rate_percent)
    n = positive_whole("months", months)

    r = rate / 100 / 12
    growth_minus_one = _growth_minus_one(r, n)
    if growth_minus_one == 0:
        return p / n
    return p * r * (growth_minus_one + 1) / growth_minus_one


def compound_annual_growth_rate(
    initial_value: float, final_value: float, years: float
) -> float:
    """Return the CAGR (percent) turning ``initial_value`` into ``final_value``."""
    start = positive("initialValue", initial_value)
    end = non_negative("finalValue", final_value)
    n = positive("years", years)
    return ((end / start) ** (1 / n) - 1) * 100
