from datetime import date

import pandas as pd
import pytest

from branch_cashflow.analytics import compute_analytics
from branch_cashflow.comparison import compare_months, personal_expense_report
from branch_cashflow.periods import Period
from branch_cashflow.views import (
    categories_to_dataframe,
    comparison_to_dataframe,
    expansion_to_dataframe,
    format_currency,
    format_percentage,
    monthly_metrics_to_dataframe,
    personal_report_to_dataframe,
    profit_first_to_dataframe,
    summary_to_dataframe,
)


@pytest.fixture
def transactions() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "date": pd.to_datetime(
                ["2024-01-05", "2024-01-09", "2024-02-03", "2024-02-10", "2024-02-11"]
            ),
            "type": ["income", "expense", "income", "expense", "expense"],
            "category": ["Sales", "Rent", "Sales", "Supplies", "Food"],
            "amount": [1000.0, 333.333, 1500.0, 200.0, 50.0],
            "is_personal": [False, False, False, False, True],
        }
    )


@pytest.mark.parametrize(
    ("amount", "currency", "expected"),
    [
        (1234.4, "PHP", "₱1,234"),
        (-2500, "PHP", "-₱2,500"),
        (0.4, "PHP", "₱0"),
        (99.5, "USD", "$100"),
        (10, "JPY", "JPY 10"),
    ],
)
def test_format_currency(amount, currency, expected) -> None:
    assert format_currency(amount, currency) == expected


def test_format_percentage() -> None:
    assert format_percentage(12.345) == "+12.3%"
    assert format_percentage(-3, 2) == "-3.00%"
    assert format_percentage(0) == "+0.0%"


def test_analytics_tables(transactions) -> None:
    period = Period(date(2024, 1, 1), date(2024, 2, 29), "Jan-Feb")
    result = compute_analytics(transactions, period)

    summary = summary_to_dataframe(result)
    assert list(summary.columns) == ["key", "label", "value", "unit"]
    values = dict(zip(summary["key"], summary["value"]))
    assert values["income"] == 2500.0
    assert values["expenses"] == pytest.approx(583.33)
    assert values["transaction_count"] == 5
    labels = dict(zip(summary["key"], summary["label"]))
    assert labels["best_month"] == "Best month (2024-02)"

    monthly = monthly_metrics_to_dataframe(result.monthly_metrics)
    assert list(monthly["month"]) == ["2024-01", "2024-02"]
    assert monthly.loc[0, "expenses"] == 333.33

    categories = categories_to_dataframe(result.top_categories)
    assert list(categories["rank"]) == [1, 2, 3]
    assert categories.loc[0, "category"] == "Rent"

    expansion = expansion_to_dataframe(result.expansion)
    assert expansion.iloc[-1]["key"] == "total"
    assert expansion.iloc[-1]["score"] == result.expansion.score

    profit_first = profit_first_to_dataframe(result.profit_first)
    assert list(profit_first.columns) == [
        "key",
        "label",
        "target_pct",
        "actual_pct",
        "variance_pct",
        "actual_amount",
    ]


def test_empty_tables_keep_their_columns() -> None:
    assert list(categories_to_dataframe(()).columns) == ["rank", "category", "amount"]
    assert monthly_metrics_to_dataframe(()).empty


def test_comparison_and_personal_tables(transactions) -> None:
    comparison = compare_months(transactions, (2024, 2), (2024, 1))
    df = comparison_to_dataframe(comparison)

    assert list(df["key"]) == ["income", "expenses", "profit", "savings"]
    assert df.loc[0, "current"] == 1500.0
    assert df.loc[0, "previous"] == 1000.0
    assert df.loc[0, "change_pct"] == 50.0

    report = personal_expense_report(transactions, 2024, 2)
    personal = personal_report_to_dataframe(report)
    assert personal.to_dict("records") == [{"category": "Food", "amount": 50.0, "share_pct": 100.0}]
