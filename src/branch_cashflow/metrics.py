# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Derived business metrics for Branch Cashflow.

This module complements the monthly rollup (engine.py) with the metrics shown
on the analytics page. Each metric is a small pure function over either the
list of `MonthlyMetric` or the period-filtered transaction frame:

- revenue growth between the last two months,
- expense breakdown by category and the top categories,
- personal vs business expense split,
- profit consistency (share of profitable months),
- cash runway in months,
- lowest monthly margin and average month-over-month revenue growth,
- break-even revenue,
- best and worst month,
- category trend between the first and second half of the window,
- average income transaction size.

Every ratio has an explicit 0 fallback when its denominator is 0; none of
these functions raise on empty input.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .engine import MonthlyMetric, month_key


@dataclass(frozen=True)
class CategoryTrend:
    """Expense amount of a category in each half of the window."""

    category: str
    first_half: float
    second_half: float
    change_pct: float


def percentage_change(current: float, previous: float) -> float:
    """
    Percent change from `previous` to `current`.

    When `previous` is 0 the change is reported as 100 if `current` is
    positive and 0 otherwise.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def _expenses(transactions: pd.DataFrame) -> pd.DataFrame:
    if transactions.empty:
        return transactions
    return transactions.loc[transactions["type"] == "expense"]


def revenue_growth(monthly: Sequence[MonthlyMetric]) -> float:
    """Percent change of income between the last two months (0 if not computable)."""
    if len(monthly) < 2:
        return 0.0
    current = monthly[-1].income
    previous = monthly[-2].income
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100


def category_breakdown(transactions: pd.DataFrame) -> dict[str, float]:
    """Sum of expense amounts per category, largest first."""
    expenses = _expenses(transactions)
    if expenses.empty:
        return {}
    sums = expenses.groupby("category", sort=True)["amount"].sum()
    ordered = sorted(sums.items(), key=lambda kv: kv[1], reverse=True)
    return {str(cat): float(amount) for cat, amount in ordered}


def top_categories(
    breakdown: dict[str, float],
    n: int = 5,
) -> list[tuple[str, float]]:
    """Return the `n` largest (category, amount) pairs."""
    ordered = sorted(breakdown.items(), key=lambda kv: kv[1], reverse=True)
    return ordered[:n]


def personal_business_split(
    transactions: pd.DataFrame,
    total_expenses: float,
) -> tuple[float, float]:
    """Return (personal expenses, business expenses)."""
    expenses = _expenses(transactions)
    if expenses.empty:
        return 0.0, float(total_expenses)
    personal = float(expenses.loc[expenses["is_personal"].astype(bool), "amount"].sum())
    return personal, float(total_expenses) - personal


def profit_consistency(monthly: Sequence[MonthlyMetric]) -> float:
    """Percentage of months with a strictly positive gross profit."""
    if not monthly:
        return 0.0
    profitable = sum(1 for m in monthly if m.gross_profit > 0)
    return profitable / len(monthly) * 100


def average_monthly_expenses(monthly: Sequence[MonthlyMetric]) -> float:
    if not monthly:
        return 0.0
    return sum(m.expenses for m in monthly) / len(monthly)


def cash_runway_months(gross_profit: float, monthly: Sequence[MonthlyMetric]) -> float:
    """Gross profit expressed in months of average expenses."""
    avg_expenses = average_monthly_expenses(monthly)
    if avg_expenses == 0:
        return 0.0
    return gross_profit / avg_expenses


def lowest_margin(monthly: Sequence[MonthlyMetric]) -> float:
    if not monthly:
        return 0.0
    return min(m.gross_margin for m in monthly)


def average_revenue_growth(monthly: Sequence[MonthlyMetric]) -> float:
    """
    Mean of month-over-month income growth rates.

    Transitions whose previous month had no income are left out.
    """
    rates = [
        (cur.income - prev.income) / prev.income * 100
        for prev, cur in zip(monthly, monthly[1:])
        if prev.income > 0
    ]
    if not rates:
        return 0.0
    return sum(rates) / len(rates)


def break_even_revenue(monthly: Sequence[MonthlyMetric]) -> float:
    """
    Monthly revenue needed to cover average monthly costs.

    avg_cogs / contribution_margin_ratio, where the ratio is
    (avg_revenue - avg_cogs) / avg_revenue. Returns 0 when there is no
    revenue or the ratio is not positive.
    """
    if not monthly:
        return 0.0
    months = len(monthly)
    avg_revenue = sum(m.income for m in monthly) / months
    avg_cogs = sum(m.expenses for m in monthly) / months
    if avg_revenue == 0:
        return 0.0
    ratio = (avg_revenue - avg_cogs) / avg_revenue
    if ratio <= 0:
        return 0.0
    return avg_cogs / ratio


def best_and_worst_month(
    monthly: Sequence[MonthlyMetric],
) -> tuple[Optional[MonthlyMetric], Optional[MonthlyMetric]]:
    """Months with the highest and lowest gross profit (first one wins ties)."""
    if not monthly:
        return None, None
    best = max(monthly, key=lambda m: m.gross_profit)
    worst = min(monthly, key=lambda m: m.gross_profit)
    return best, worst


def category_trends(
    transactions: pd.DataFrame,
    monthly: Sequence[MonthlyMetric],
    categories: Sequence[str],
) -> list[CategoryTrend]:
    """
    Compare each category's expenses between both halves of the window.

    The months of the window are split at floor(count / 2); the first half
    holds the earlier months. The change is 0 when the first half is 0.
    """
    if not categories:
        return []

    months = [m.month for m in monthly]
    mid = len(months) // 2
    first_months = set(months[:mid])
    second_months = set(months[mid:])

    expenses = _expenses(transactions)
    if expenses.empty:
        keyed = pd.DataFrame(columns=["category", "amount", "month"])
    else:
        keyed = expenses[["category", "amount"]].copy()
        keyed["month"] = [month_key(d) for d in expenses["date"]]

    trends: list[CategoryTrend] = []
    for category in categories:
        rows = keyed.loc[keyed["category"] == category]
        first = float(rows.loc[rows["month"].isin(first_months), "amount"].sum())
        second = float(rows.loc[rows["month"].isin(second_months), "amount"].sum())
        change = (second - first) / first * 100 if first > 0 else 0.0
        trends.append(
            CategoryTrend(
                category=category,
                first_half=first,
                second_half=second,
                change_pct=change,
            )
        )
    return trends


def average_transaction_size(transactions: pd.DataFrame, total_income: float) -> float:
    """Average amount of an income transaction (0 when there are none)."""
    if transactions.empty:
        return 0.0
    count = int((transactions["type"] == "income").sum())
    if count == 0:
        return 0.0
    return total_income / count
