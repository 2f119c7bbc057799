# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Error types for Personal FinSight.

The engine has a single failure kind: ``InvalidInput``. It is raised before
any computation happens, carries the offending field name and the violated
constraint, and subclasses ``ValueError`` so callers that already handle
``ValueError`` (as the configuration layer does) keep working.
"""


class InvalidInput(ValueError):
    """
    Raised when a caller supplies a value the engine cannot work with.

    Attributes:
        field: Name of the offending input (e.g. 'years', 'monthlyIncome').
        constraint: Human-readable constraint that was violated
            (e.g. 'must be > 0').
    """

    def __init__(self, field: str, constraint: str):
        self.field = field
        self.constraint = constraint
        super().__init__(f"{field}: {constraint}")
