# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for Branch Cashflow.

This module turns the immutable results of the analytics engine and the
comparison reports into pandas DataFrames ready for display or CSV export,
and formats single values for the KPI lines printed by the CLI.

The helpers never compute metrics themselves: they only select, order,
round and label values that were already computed.
"""

from typing import Optional

import pandas as pd

from .analytics import AnalyticsResult
from .comparison import PeriodComparison, PersonalExpenseReport
from .engine import MonthlyMetric, monthly_metrics_frame
from .expansion import ExpansionReadiness
from .metrics import CategoryTrend
from .profit_first import ProfitFirstAllocation

CURRENCY_SYMBOLS = {"PHP": "₱", "USD": "$", "EUR": "€"}


def format_currency(amount: float, currency: str = "PHP") -> str:
    """Format an amount with its currency sign, thousands separators and no decimals."""
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    sign = "-" if round(amount) < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.0f}"


def format_percentage(value: float, decimals: int = 1) -> str:
    """Format a percentage with an explicit sign, e.g. '+12.5%' or '-3.0%'."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{decimals}f}%"


def monthly_metrics_to_dataframe(
    metrics: tuple[MonthlyMetric, ...] | list[MonthlyMetric],
    decimals: int = 2,
) -> pd.DataFrame:
    df = monthly_metrics_frame(list(metrics))
    if df.empty:
        return df
    return df.round(
        {
            "income": 2,
            "expenses": 2,
            "gross_profit": 2,
            "gross_margin": decimals,
        }
    )


def categories_to_dataframe(categories: tuple[tuple[str, float], ...]) -> pd.DataFrame:
    """Top categories as rows (rank, category, amount)."""
    rows = [
        {"rank": rank, "category": category, "amount": round(amount, 2)}
        for rank, (category, amount) in enumerate(categories, start=1)
    ]
    return pd.DataFrame(rows, columns=["rank", "category", "amount"])


def category_trends_to_dataframe(
    trends: tuple[CategoryTrend, ...],
    decimals: int = 1,
) -> pd.DataFrame:
    columns = ["category", "first_half", "second_half", "change_pct"]
    rows = [
        {
            "category": t.category,
            "first_half": round(t.first_half, 2),
            "second_half": round(t.second_half, 2),
            "change_pct": round(t.change_pct, decimals),
        }
        for t in trends
    ]
    return pd.DataFrame(rows, columns=columns)


def expansion_to_dataframe(readiness: ExpansionReadiness, decimals: int = 1) -> pd.DataFrame:
    """
    One row per factor followed by a TOTAL row carrying the grade.

    Columns: key, label, value, status, score, max.
    """
    rows: list[dict[str, object]] = [
        {
            "key": f.key,
            "label": f.label,
            "value": round(f.value, decimals),
            "status": f.status,
            "score": f.score,
            "max": f.max,
        }
        for f in readiness.factors
    ]
    rows.append(
        {
            "key": "total",
            "label": f"Grade {readiness.grade} ({readiness.status})",
            "value": float("nan"),
            "status": readiness.status,
            "score": readiness.score,
            "max": sum(f.max for f in readiness.factors),
        }
    )
    return pd.DataFrame(rows, columns=["key", "label", "value", "status", "score", "max"])


def profit_first_to_dataframe(
    allocation: ProfitFirstAllocation,
    decimals: int = 1,
) -> pd.DataFrame:
    columns = ["key", "label", "target_pct", "actual_pct", "variance_pct", "actual_amount"]
    rows = [
        {
            "key": line.key,
            "label": line.label,
            "target_pct": round(line.target_pct, decimals),
            "actual_pct": round(line.actual_pct, decimals),
            "variance_pct": round(line.variance_pct, decimals),
            "actual_amount": round(line.actual_amount, 2),
        }
        for line in allocation.lines
    ]
    return pd.DataFrame(rows, columns=columns)


def summary_to_dataframe(result: AnalyticsResult, decimals: int = 1) -> pd.DataFrame:
    """
    Headline KPIs of an analytics run as (key, label, value, unit) rows.

    Units are "amount", "percent", "months" or "count". Best and worst month
    are reported through their gross profit, with the month in the label.
    """

    def _month_row(key: str, label: str, metric: Optional[MonthlyMetric]) -> dict:
        if metric is None:
            return {"key": key, "label": label, "value": float("nan"), "unit": "amount"}
        return {
            "key": key,
            "label": f"{label} ({metric.month})",
            "value": round(metric.gross_profit, 2),
            "unit": "amount",
        }

    def amount(value: float) -> float:
        return round(value, 2)

    def pct(value: float) -> float:
        return round(value, decimals)

    rows = [
        {"key": "income", "label": "Total income", "value": amount(result.income), "unit": "amount"},
        {"key": "expenses", "label": "Total expenses", "value": amount(result.expenses), "unit": "amount"},
        {"key": "gross_profit", "label": "Gross profit", "value": amount(result.gross_profit), "unit": "amount"},
        {"key": "gross_margin", "label": "Gross margin", "value": pct(result.gross_margin), "unit": "percent"},
        {"key": "net_margin", "label": "Net margin", "value": pct(result.net_margin), "unit": "percent"},
        {"key": "revenue_growth", "label": "Revenue growth", "value": pct(result.revenue_growth), "unit": "percent"},
        {"key": "cash_burn", "label": "Cash burn", "value": amount(result.cash_burn), "unit": "amount"},
        {"key": "personal_expenses", "label": "Personal expenses", "value": amount(result.personal_expenses), "unit": "amount"},
        {"key": "business_expenses", "label": "Business expenses", "value": amount(result.business_expenses), "unit": "amount"},
        {"key": "transaction_count", "label": "Transactions", "value": result.transaction_count, "unit": "count"},
        {"key": "profit_consistency", "label": "Profit consistency", "value": pct(result.profit_consistency), "unit": "percent"},
        {"key": "cash_runway_months", "label": "Cash runway", "value": round(result.cash_runway_months, 1), "unit": "months"},
        {"key": "lowest_margin", "label": "Lowest monthly margin", "value": pct(result.lowest_margin), "unit": "percent"},
        {"key": "average_revenue_growth", "label": "Average revenue growth", "value": pct(result.average_revenue_growth), "unit": "percent"},
        {"key": "break_even_revenue", "label": "Break-even revenue", "value": amount(result.break_even_revenue), "unit": "amount"},
        {"key": "average_transaction_size", "label": "Average transaction size", "value": amount(result.average_transaction_size), "unit": "amount"},
        _month_row("best_month", "Best month", result.best_month),
        _month_row("worst_month", "Worst month", result.worst_month),
    ]
    return pd.DataFrame(rows, columns=["key", "label", "value", "unit"])


def comparison_to_dataframe(comparison: PeriodComparison, decimals: int = 1) -> pd.DataFrame:
    """
    Side-by-side KPIs of two periods with the percent change.

    The `current` and `previous` columns follow `comparison.current.period`
    and `comparison.previous.period`.
    """
    current = comparison.current
    previous = comparison.previous
    lines = (
        ("income", "Income", current.income, previous.income, comparison.income_change),
        ("expenses", "Expenses", current.expenses, previous.expenses, comparison.expenses_change),
        ("profit", "Profit", current.profit, previous.profit, comparison.profit_change),
        ("savings", "Savings", current.savings, previous.savings, comparison.savings_change),
    )
    rows = [
        {
            "key": key,
            "label": label,
            "current": round(cur, 2),
            "previous": round(prev, 2),
            "change_pct": round(change, decimals),
        }
        for key, label, cur, prev, change in lines
    ]
    return pd.DataFrame(rows, columns=["key", "label", "current", "previous", "change_pct"])


def personal_report_to_dataframe(report: PersonalExpenseReport) -> pd.DataFrame:
    """Personal expense categories with their share of total personal spend."""
    rows = [
        {
            "category": category,
            "amount": round(amount, 2),
            "share_pct": round(amount / report.total_personal * 100, 1)
            if report.total_personal
            else 0.0,
        }
        for category, amount in report.categories
    ]
    return pd.DataFrame(rows, columns=["category", "amount", "share_pct"])
