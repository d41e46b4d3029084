# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period comparison reports.

Three reports complement the analytics page:

- ``compare_months``: two calendar months side by side (Monthly page).
- ``compare_years``: two calendar years side by side, with the monthly
  breakdown of each year (Dashboard year-to-year KPI cards).
- ``personal_expense_report``: personal draws of one calendar month
  (Personal page).

Each side of a comparison is a ``PeriodSummary`` holding income, expenses,
profit and savings. Savings are the share of profit set aside, i.e.
``profit * savings_rate``; a loss yields negative savings. Changes between
the two sides use ``metrics.percentage_change`` (100 when the previous value
is 0 and the current one is positive, 0 otherwise).
"""

from dataclasses import dataclass

import pandas as pd

from .engine import MonthlyMetric, monthly_rollup
from .metrics import percentage_change
from .periods import Period, filter_transactions_by_period, period_month, period_year

DEFAULT_SAVINGS_RATE = 0.5


@dataclass(frozen=True)
class PeriodSummary:
    """Totals of one side of a comparison."""

    period: Period
    income: float
    expenses: float
    profit: float
    savings: float
    personal_expenses: float
    transaction_count: int
    monthly_metrics: tuple[MonthlyMetric, ...]


@dataclass(frozen=True)
class PeriodComparison:
    """
    Two summaries and the percent change from `previous` to `current`.

    `current` is the first period asked for; with the default selections it
    is the most recent one.
    """

    current: PeriodSummary
    previous: PeriodSummary
    income_change: float
    expenses_change: float
    profit_change: float
    savings_change: float


@dataclass(frozen=True)
class PersonalExpenseReport:
    period: Period
    total_personal: float
    total_income: float
    personal_ratio: float
    categories: tuple[tuple[str, float], ...]
    transactions: pd.DataFrame


def summarize_period(
    transactions: pd.DataFrame,
    period: Period,
    *,
    savings_rate: float = DEFAULT_SAVINGS_RATE,
) -> PeriodSummary:
    """Filter `transactions` to `period` and total them."""
    window = filter_transactions_by_period(transactions, period)
    monthly = monthly_rollup(window)

    income = sum(m.income for m in monthly)
    expenses = sum(m.expenses for m in monthly)
    profit = income - expenses

    if window.empty:
        personal = 0.0
    else:
        mask = (window["type"] == "expense") & window["is_personal"].astype(bool)
        personal = float(window.loc[mask, "amount"].sum())

    return PeriodSummary(
        period=period,
        income=income,
        expenses=expenses,
        profit=profit,
        savings=profit * savings_rate,
        personal_expenses=personal,
        transaction_count=len(window),
        monthly_metrics=tuple(monthly),
    )


def _compare(current: PeriodSummary, previous: PeriodSummary) -> PeriodComparison:
    return PeriodComparison(
        current=current,
        previous=previous,
        income_change=percentage_change(current.income, previous.income),
        expenses_change=percentage_change(current.expenses, previous.expenses),
        profit_change=percentage_change(current.profit, previous.profit),
        savings_change=percentage_change(current.savings, previous.savings),
    )


def compare_months(
    transactions: pd.DataFrame,
    first: tuple[int, int],
    second: tuple[int, int],
    *,
    savings_rate: float = DEFAULT_SAVINGS_RATE,
) -> PeriodComparison:
    """
    Compare two calendar months.

    Args:
        transactions: Normalized transactions of one branch.
        first: (year, month) of the month reported as `current`.
        second: (year, month) of the month reported as `previous`.
        savings_rate: Share of profit counted as savings.
    """
    current = summarize_period(
        transactions, period_month(*first), savings_rate=savings_rate
    )
    previous = summarize_period(
        transactions, period_month(*second), savings_rate=savings_rate
    )
    return _compare(current, previous)


def compare_years(
    transactions: pd.DataFrame,
    first: int,
    second: int,
    *,
    savings_rate: float = DEFAULT_SAVINGS_RATE,
) -> PeriodComparison:
    """Compare two calendar years (`first` is reported as `current`)."""
    current = summarize_period(
        transactions, period_year(first), savings_rate=savings_rate
    )
    previous = summarize_period(
        transactions, period_year(second), savings_rate=savings_rate
    )
    return _compare(current, previous)


def personal_expense_report(
    transactions: pd.DataFrame,
    year: int,
    month: int,
) -> PersonalExpenseReport:
    """
    Personal draws of one calendar month.

    The ratio is personal expenses as a percentage of the month's income
    (0 when there is no income). Categories are sorted by amount, largest
    first; the transaction list is sorted by date.
    """
    period = period_month(year, month)
    window = filter_transactions_by_period(transactions, period)

    if window.empty:
        return PersonalExpenseReport(
            period=period,
            total_personal=0.0,
            total_income=0.0,
            personal_ratio=0.0,
            categories=(),
            transactions=window,
        )

    income = float(window.loc[window["type"] == "income", "amount"].sum())
    mask = (window["type"] == "expense") & window["is_personal"].astype(bool)
    personal = window.loc[mask].sort_values("date", kind="stable")
    total_personal = float(personal["amount"].sum())

    by_category = personal.groupby("category")["amount"].sum()
    categories = sorted(
        ((str(cat), float(amount)) for cat, amount in by_category.items()),
        key=lambda kv: kv[1],
        reverse=True,
    )

    ratio = total_personal / income * 100 if income != 0 else 0.0

    return PersonalExpenseReport(
        period=period,
        total_personal=total_personal,
        total_income=income,
        personal_ratio=ratio,
        categories=tuple(categories),
        transactions=personal.reset_index(drop=True),
    )
