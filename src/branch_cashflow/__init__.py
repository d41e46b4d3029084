# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Branch Cashflow
---------------

A Python-based cash-flow tracking and analytics application for small
businesses running several branches (shops, workshops). Each branch records
income and expense transactions; the analytics engine turns them into
monthly metrics and business-health indicators.

Main capabilities:
- a database-first store for branches and transactions (SQLite),
- CSV / Excel import (transaction lists, multi-branch files, daily ledgers),
- reporting periods (trailing 3/6/12 months, custom ranges, months, years),
- monthly rollups, margins, growth, category breakdowns and trends,
- expansion-readiness scoring (letter grade from four health factors),
- Profit-First allocation check against target percentages,
- month-to-month, year-to-year and personal-expense reports.

Branch Cashflow separates computation (engine, metrics), configuration
(TOML) and presentation (CLI), making it suitable for scripting and
automation.


Version: 0.2.0

Usage:
    python -m branch_cashflow.cli --help
"""

__all__ = ["analytics", "engine", "metrics", "views", "io"]

__version__ = "0.2.0"
