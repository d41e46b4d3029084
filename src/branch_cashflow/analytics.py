# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Analytics orchestration for a reporting period.

This module provides the high-level entry point used to compute every output
of the analytics page in a *single pass* over a branch's transactions.

Overview
--------
``compute_analytics()`` performs all required steps:

1. Filters the transactions to the reporting period (inclusive bounds).
2. Rolls them up per calendar month (``engine.monthly_rollup``).
3. Derives the period totals and the aggregate metrics (``metrics``).
4. Scores expansion readiness (``expansion``).
5. Compares the income allocation with the Profit-First targets
   (``profit_first``).

The result is an immutable ``AnalyticsResult`` that the CLI (or any other
presentation layer) renders without further computation.

Separation of concerns
----------------------
- ``engine.py`` remains the single source of truth for the monthly rollup.
- ``metrics.py`` holds one pure function per derived metric.
- ``analytics.py`` assembles everything for one period.

Every step is a pure function of the transaction frame and the period: the
same input always yields the same result, and an empty input yields zeros
(and no best/worst month) rather than an error.
"""

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .engine import MonthlyMetric, gross_margin, monthly_rollup
from .expansion import ExpansionReadiness, assess_expansion_readiness
from .metrics import (
    CategoryTrend,
    average_revenue_growth,
    average_transaction_size,
    best_and_worst_month,
    break_even_revenue,
    cash_runway_months,
    category_breakdown,
    category_trends,
    lowest_margin,
    personal_business_split,
    profit_consistency,
    revenue_growth,
    top_categories,
)
from .periods import Period, filter_transactions_by_period
from .profit_first import (
    DEFAULT_TARGETS,
    ProfitFirstAllocation,
    ProfitFirstTargets,
    allocate,
)


@dataclass(frozen=True)
class AnalyticsResult:
    """
    Every figure shown on the analytics page for one period.

    Attributes
    ----------
    period :
        The reporting period the figures were computed for (None when the
        caller passed an already filtered frame without a period).
    income, expenses, gross_profit :
        Period totals. ``expenses`` includes personal draws.
    gross_margin, net_margin :
        Gross profit as a percentage of income (0 when income is 0). There
        are no separate operating costs, so both margins are equal.
    revenue_growth :
        Income change between the last two months of the window, in percent.
    cash_burn :
        Net cash change of the period (equal to gross profit; negative
        when the branch spent more than it earned).
    monthly_metrics :
        One MonthlyMetric per month present in the window, oldest first.
    top_categories :
        Up to ``top_n`` (category, amount) pairs, largest expense first.
    personal_expenses, business_expenses :
        Split of ``expenses`` on the ``is_personal`` flag.
    """

    period: Optional[Period]
    income: float
    expenses: float
    gross_profit: float
    gross_margin: float
    net_margin: float
    revenue_growth: float
    cash_burn: float
    monthly_metrics: tuple[MonthlyMetric, ...]
    top_categories: tuple[tuple[str, float], ...]
    personal_expenses: float
    business_expenses: float
    transaction_count: int
    profit_consistency: float
    cash_runway_months: float
    lowest_margin: float
    average_revenue_growth: float
    break_even_revenue: float
    best_month: Optional[MonthlyMetric]
    worst_month: Optional[MonthlyMetric]
    category_trends: tuple[CategoryTrend, ...]
    average_transaction_size: float
    expansion: ExpansionReadiness
    profit_first: ProfitFirstAllocation


def compute_analytics(
    transactions: pd.DataFrame,
    period: Optional[Period] = None,
    *,
    top_n: int = 5,
    profit_first_targets: Optional[ProfitFirstTargets] = None,
    filtered: bool = False,
) -> AnalyticsResult:
    """
    Compute all analytics outputs for one reporting period.

    Parameters
    ----------
    transactions:
        Normalized transactions of one branch (see `io` / `db`).
    period:
        Reporting window. When None, or when ``filtered`` is True, the frame
        is used as is.
    top_n:
        Number of expense categories kept in ``top_categories`` (and used for
        the category trends).
    profit_first_targets:
        Target percentages for the Profit-First check. Defaults to
        10 / 40 / 40 / 15.
    filtered:
        Set to True when ``transactions`` is already restricted to ``period``.

    Returns
    -------
    AnalyticsResult
    """
    if period is not None and not filtered:
        window = filter_transactions_by_period(transactions, period)
    else:
        window = transactions

    monthly = monthly_rollup(window)

    income = sum(m.income for m in monthly)
    expenses = sum(m.expenses for m in monthly)
    profit = income - expenses
    margin = gross_margin(income, profit)

    breakdown = category_breakdown(window)
    top = top_categories(breakdown, top_n)
    personal, business = personal_business_split(window, expenses)

    consistency = profit_consistency(monthly)
    low_margin = lowest_margin(monthly)
    avg_growth = average_revenue_growth(monthly)
    best, worst = best_and_worst_month(monthly)

    expansion = assess_expansion_readiness(
        profit_consistency=consistency,
        gross_margin=margin,
        average_revenue_growth=avg_growth,
        lowest_margin=low_margin,
    )

    allocation = allocate(
        income=income,
        gross_profit=profit,
        owner_pay=personal,
        operating_expenses=business,
        targets=profit_first_targets or DEFAULT_TARGETS,
    )

    return AnalyticsResult(
        period=period,
        income=income,
        expenses=expenses,
        gross_profit=profit,
        gross_margin=margin,
        net_margin=margin,
        revenue_growth=revenue_growth(monthly),
        cash_burn=profit,
        monthly_metrics=tuple(monthly),
        top_categories=tuple(top),
        personal_expenses=personal,
        business_expenses=business,
        transaction_count=len(window),
        profit_consistency=consistency,
        cash_runway_months=cash_runway_months(profit, monthly),
        lowest_margin=low_margin,
        average_revenue_growth=avg_growth,
        break_even_revenue=break_even_revenue(monthly),
        best_month=best,
        worst_month=worst,
        category_trends=tuple(
            category_trends(window, monthly, [cat for cat, _ in top])
        ),
        average_transaction_size=average_transaction_size(window, income),
        expansion=expansion,
        profit_first=allocation,
    )
