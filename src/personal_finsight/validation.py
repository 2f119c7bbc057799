# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Input validation helpers shared by the calculators and the advice engine.

Every helper either returns a clean ``float``/``int`` or raises
``InvalidInput`` naming the offending field.
"""

import math
import numbers
from typing import Any

from .errors import InvalidInput

# Annual rates below -100% would imply losing more than the whole principal.
MIN_ANNUAL_RATE_PERCENT = -100.0


def as_number(field: str, value: Any) -> float:
    """
    Return ``value`` as a finite float.

    Booleans, strings, None, NaN and infinities are rejected even though some
    of them could be coerced by ``float()``.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidInput(field, "must be a number")
    number = float(value)
    if not math.isfinite(number):
        raise InvalidInput(field, "must be a finite number")
    return number


def non_negative(field: str, value: Any) -> float:
    number = as_number(field, value)
    if number < 0:
        raise InvalidInput(field, "must be >= 0")
    return number


def positive(field: str, value: Any) -> float:
    number = as_number(field, value)
    if number <= 0:
        raise InvalidInput(field, "must be > 0")
    return number


def positive_whole(field: str, value: Any) -> int:
    """Return a strictly positive whole number (e.g. a count of months)."""
    number = positive(field, value)
    if not number.is_integer():
        raise InvalidInput(field, "must be a whole number")
    return int(number)


def annual_rate(field: str, value: Any) -> float:
    number = as_number(field, value)
    if number < MIN_ANNUAL_RATE_PERCENT:
        raise InvalidInput(field, "must be >= -100")
    return number


def clamp_non_negative(field: str, value: Any) -> float:
    """Validate a number and clamp negatives to 0 (snapshot boundary rule)."""
    return max(0.0, as_number(field, value))
