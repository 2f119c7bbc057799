# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Rounding helpers.

Python's built-in ``round`` uses banker's rounding (0.25 -> 0.2). Figures
shown to users (savings rate, category share, trend percentages) are rounded
half-up instead, so that 12.25% is displayed as 12.3%.
"""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, places: int = 1) -> float:
    """Round ``value`` to ``places`` decimals, ties away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percent(value: float, total: float) -> float:
    """
    Return ``value`` as a percentage of ``total`` with one decimal.

    A non-positive total yields 0.0 rather than a division error.
    """
    if total <= 0:
        return 0.0
    return round_half_up(value / total * 100, 1)


def to_cents(value: float) -> float:
    """Round a currency amount to 2 decimals (half-up)."""
    return round_half_up(value, 2)
