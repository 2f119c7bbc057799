# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Personal FinSight
-----------------

A Python library and command-line tool that turns a user's personal financial
situation into actionable guidance and investment projections.

Main capabilities:
- investment calculators (SIP, lumpsum, fixed deposit, CAGR) and loan EMI
  with full amortization schedules,
- emergency fund progress tracking,
- expense aggregation by category and by month, with month-over-month trend,
- a rule-based advice engine producing an asset allocation, prioritized
  action items, a spending focus and a budget summary,
- TOML-configurable advice policy (thresholds and allocation table).

Personal FinSight is stateless: every result is computed on demand from the
inputs supplied by the caller and nothing is persisted.


Version: 0.1.0

Usage:
    python -m personal_finsight.cli --help
"""

__all__ = ["advice", "calculators", "expenses", "growth", "models", "views"]

__version__ = "0.1.0"
