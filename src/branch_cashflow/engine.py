# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Monthly aggregation engine for Branch Cashflow.

This module performs the base reduction every report is built on: it groups
a (period-filtered) transaction frame by calendar month and sums income and
expenses per month.

Input
-----
A DataFrame with at least these columns (as produced by `io` or `db`):

    date   (datetime64[ns])
    type   ("income" | "expense")
    amount (float, non-negative)

Output
------
A list of `MonthlyMetric`, one per calendar month present in the input,
sorted chronologically. Each metric carries:

    month         "YYYY-MM" (zero-padded, so string order is chronological)
    income        sum of income amounts
    expenses      sum of expense amounts
    gross_profit  income - expenses
    gross_margin  gross_profit / income * 100, or 0 when income is 0

The derived business metrics (growth, consistency, break-even, ...) live in
`metrics.py`; `analytics.py` orchestrates a full analytics pass.
"""

from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True)
class MonthlyMetric:
    """Income/expense rollup of one calendar month."""

    month: str
    income: float
    expenses: float
    gross_profit: float
    gross_margin: float


def gross_margin(income: float, gross_profit: float) -> float:
    """Gross profit as a percentage of income; 0 when there is no income."""
    if income == 0:
        return 0.0
    return gross_profit / income * 100


def month_key(value) -> str:
    """Return the zero-padded 'YYYY-MM' key of a date-like value."""
    ts = pd.Timestamp(value)
    return f"{ts.year:04d}-{ts.month:02d}"


def monthly_rollup(transactions: pd.DataFrame) -> list[MonthlyMetric]:
    """Aggregate transactions into chronologically sorted monthly metrics.

    Steps:
        1. Initialize an {income, expenses} bucket the first time a month
           key is seen.
        2. Add each transaction amount to the income bucket when its type is
           'income', to the expenses bucket otherwise.
        3. Sort month keys ascending and derive gross profit and margin.

    Args:
        transactions: Transactions already filtered to the reporting period.

    Returns:
        One MonthlyMetric per month present in the input; an empty list for
        an empty input.
    """
    if transactions.empty:
        return []

    buckets: dict[str, dict[str, float]] = {}

    for t in transactions[["date", "type", "amount"]].itertuples(index=False):
        key = month_key(t.date)
        bucket = buckets.setdefault(key, {"income": 0.0, "expenses": 0.0})
        if t.type == "income":
            bucket["income"] += float(t.amount)
        else:
            bucket["expenses"] += float(t.amount)

    out: list[MonthlyMetric] = []
    for key in sorted(buckets):
        income = buckets[key]["income"]
        expenses = buckets[key]["expenses"]
        profit = income - expenses
        out.append(
            MonthlyMetric(
                month=key,
                income=income,
                expenses=expenses,
                gross_profit=profit,
                gross_margin=gross_margin(income, profit),
            )
        )
    return out


def monthly_metrics_frame(metrics: list[MonthlyMetric]) -> pd.DataFrame:
    """Return monthly metrics as a DataFrame (one row per month)."""
    columns = ["month", "income", "expenses", "gross_profit", "gross_margin"]
    if not metrics:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(
        [
            {
                "month": m.month,
                "income": m.income,
                "expenses": m.expenses,
                "gross_profit": m.gross_profit,
                "gross_margin": m.gross_margin,
            }
            for m in metrics
        ],
        columns=columns,
    )
