from datetime import date

import pandas as pd
import pytest

from branch_cashflow.analytics import compute_analytics
from branch_cashflow.engine import (
    MonthlyMetric,
    gross_margin,
    month_key,
    monthly_metrics_frame,
    monthly_rollup,
)
from branch_cashflow.periods import Period, period_rolling


def make_transactions(rows: list[tuple]) -> pd.DataFrame:
    """Build a normalized transaction frame from (date, type, amount[, category, is_personal]) rows."""
    records = []
    for i, row in enumerate(rows, start=1):
        tx_date, tx_type, amount = row[:3]
        category = row[3] if len(row) > 3 else "Uncategorized"
        is_personal = row[4] if len(row) > 4 else False
        records.append(
            {
                "id": i,
                "branch_id": "test",
                "date": pd.Timestamp(tx_date),
                "type": tx_type,
                "category": category,
                "amount": float(amount),
                "description": "",
                "source": "",
                "is_personal": is_personal,
            }
        )
    return pd.DataFrame(records)


def test_single_month_rollup_within_three_month_window() -> None:
    """Income 1000 and expense 400 in January 2024 give one 60% margin month."""
    df = make_transactions(
        [
            ("2024-01-15", "income", 1000),
            ("2024-01-20", "expense", 400),
        ]
    )
    period = period_rolling(3, today=date(2024, 2, 10))

    result = compute_analytics(df, period)

    assert list(result.monthly_metrics) == [
        MonthlyMetric(
            month="2024-01",
            income=1000.0,
            expenses=400.0,
            gross_profit=600.0,
            gross_margin=60.0,
        )
    ]
    assert result.income == 1000.0
    assert result.expenses == 400.0
    assert result.gross_profit == 600.0
    assert result.gross_margin == pytest.approx(60.0)


def test_empty_input_degrades_to_zeros() -> None:
    df = make_transactions([])
    period = Period(start=date(2024, 1, 1), end=date(2024, 6, 30), label="H1")

    result = compute_analytics(df, period)

    assert result.income == 0
    assert result.expenses == 0
    assert result.gross_profit == 0
    assert result.gross_margin == 0
    assert result.monthly_metrics == ()
    assert result.best_month is None
    assert result.worst_month is None
    assert result.top_categories == ()
    assert result.transaction_count == 0
    assert result.cash_runway_months == 0
    assert result.break_even_revenue == 0


def test_month_without_income_has_zero_margin() -> None:
    df = make_transactions([("2024-03-05", "expense", 500)])

    metrics = monthly_rollup(df)

    assert len(metrics) == 1
    assert metrics[0].gross_profit == -500.0
    assert metrics[0].gross_margin == 0.0


def test_gross_margin_is_zero_without_income() -> None:
    assert gross_margin(0.0, -100.0) == 0.0
    assert gross_margin(200.0, 50.0) == pytest.approx(25.0)


def test_months_are_sorted_chronologically_with_zero_padded_keys() -> None:
    df = make_transactions(
        [
            ("2024-11-02", "income", 10),
            ("2023-12-31", "income", 20),
            ("2024-02-14", "expense", 5),
            ("2024-10-01", "income", 30),
        ]
    )

    months = [m.month for m in monthly_rollup(df)]

    assert months == ["2023-12", "2024-02", "2024-10", "2024-11"]


def test_sum_of_monthly_profit_equals_total_profit() -> None:
    df = make_transactions(
        [
            ("2024-01-03", "income", 1234.56),
            ("2024-01-09", "expense", 321.09),
            ("2024-02-11", "income", 999.99),
            ("2024-02-12", "expense", 1500.01),
            ("2024-03-01", "expense", 12.34),
            ("2024-03-30", "income", 0.01),
        ]
    )
    period = Period(start=date(2024, 1, 1), end=date(2024, 3, 31), label="Q1")

    result = compute_analytics(df, period)

    total = sum(m.gross_profit for m in result.monthly_metrics)
    assert total == pytest.approx(result.income - result.expenses)


def test_cash_burn_is_net_change_of_the_period() -> None:
    df = make_transactions(
        [
            ("2024-01-03", "income", 800),
            ("2024-01-09", "expense", 300),
            ("2024-02-12", "expense", 900),
        ]
    )
    period = Period(start=date(2024, 1, 1), end=date(2024, 2, 29), label="Jan-Feb")

    result = compute_analytics(df, period)

    assert result.cash_burn == result.gross_profit
    assert result.cash_burn == pytest.approx(-400.0)


def test_compute_analytics_is_idempotent() -> None:
    df = make_transactions(
        [
            ("2024-01-03", "income", 1000, "Sales"),
            ("2024-01-09", "expense", 300, "Supplies"),
            ("2024-02-11", "income", 1200, "Sales"),
            ("2024-02-12", "expense", 200, "Rent", True),
        ]
    )
    period = Period(start=date(2024, 1, 1), end=date(2024, 2, 29), label="Jan-Feb")

    first = compute_analytics(df, period)
    second = compute_analytics(df, period)

    assert first == second


def test_transactions_outside_period_are_ignored() -> None:
    df = make_transactions(
        [
            ("2023-12-31", "income", 5000),
            ("2024-01-01", "income", 100),
            ("2024-01-31", "expense", 40),
            ("2024-02-01", "expense", 7000),
        ]
    )
    period = Period(start=date(2024, 1, 1), end=date(2024, 1, 31), label="Jan")

    result = compute_analytics(df, period)

    assert result.transaction_count == 2
    assert result.income == 100.0
    assert result.expenses == 40.0


def test_filtered_flag_skips_period_filter() -> None:
    df = make_transactions([("2020-06-01", "income", 100)])
    period = Period(start=date(2024, 1, 1), end=date(2024, 1, 31), label="Jan")

    result = compute_analytics(df, period, filtered=True)

    assert result.income == 100.0


def test_month_key_accepts_dates_and_strings() -> None:
    assert month_key(date(2024, 3, 9)) == "2024-03"
    assert month_key("2024-11-30") == "2024-11"


def test_monthly_metrics_frame_columns() -> None:
    df = make_transactions([("2024-01-15", "income", 10)])

    frame = monthly_metrics_frame(monthly_rollup(df))

    assert list(frame.columns) == [
        "month",
        "income",
        "expenses",
        "gross_profit",
        "gross_margin",
    ]
    assert frame.loc[0, "gross_margin"] == pytest.approx(100.0)
    assert monthly_metrics_frame([]).empty
