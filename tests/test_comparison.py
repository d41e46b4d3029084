import pandas as pd
import pytest

from branch_cashflow.comparison import (
    compare_months,
    compare_years,
    personal_expense_report,
    summarize_period,
)
from branch_cashflow.periods import period_month


def make_frame(rows: list[tuple]) -> pd.DataFrame:
    """(date, type, amount, category, is_personal) rows."""
    return pd.DataFrame(
        [
            {
                "date": pd.Timestamp(d),
                "type": t,
                "category": c,
                "amount": float(a),
                "is_personal": p,
            }
            for d, t, a, c, p in rows
        ]
    )


@pytest.fixture
def ledger() -> pd.DataFrame:
    return make_frame(
        [
            ("2023-05-10", "income", 1000, "Sales", False),
            ("2023-05-20", "expense", 600, "Rent", False),
            ("2024-04-03", "income", 2000, "Sales", False),
            ("2024-04-04", "expense", 500, "Supplies", False),
            ("2024-05-02", "income", 3000, "Sales", False),
            ("2024-05-06", "expense", 1000, "Supplies", False),
            ("2024-05-07", "expense", 200, "Groceries", True),
            ("2024-05-21", "expense", 300, "Tuition", True),
            ("2024-05-25", "expense", 100, "Groceries", True),
        ]
    )


def test_summarize_period_savings_share_of_profit(ledger) -> None:
    summary = summarize_period(ledger, period_month(2024, 5), savings_rate=0.25)

    assert summary.income == pytest.approx(3000.0)
    assert summary.expenses == pytest.approx(1600.0)
    assert summary.profit == pytest.approx(1400.0)
    assert summary.savings == pytest.approx(350.0)
    assert summary.personal_expenses == pytest.approx(600.0)
    assert summary.transaction_count == 5
    assert [m.month for m in summary.monthly_metrics] == ["2024-05"]


def test_compare_months(ledger) -> None:
    result = compare_months(ledger, (2024, 5), (2024, 4))

    assert result.current.period.label == "May 2024"
    assert result.previous.period.label == "April 2024"
    assert result.income_change == pytest.approx(50.0)
    assert result.expenses_change == pytest.approx(220.0)
    # profit 1500 -> 1400, savings follow profit
    assert result.profit_change == pytest.approx(-100 / 15)
    assert result.savings_change == pytest.approx(result.profit_change)


def test_compare_months_against_empty_month(ledger) -> None:
    result = compare_months(ledger, (2024, 5), (2024, 1))

    assert result.previous.income == 0
    assert result.previous.transaction_count == 0
    assert result.income_change == 100.0


def test_compare_years(ledger) -> None:
    result = compare_years(ledger, 2024, 2023)

    assert result.current.income == pytest.approx(5000.0)
    assert result.previous.income == pytest.approx(1000.0)
    assert result.previous.profit == pytest.approx(400.0)
    assert result.income_change == pytest.approx(400.0)
    assert [m.month for m in result.current.monthly_metrics] == ["2024-04", "2024-05"]


def test_personal_expense_report(ledger) -> None:
    report = personal_expense_report(ledger, 2024, 5)

    assert report.total_personal == pytest.approx(600.0)
    assert report.total_income == pytest.approx(3000.0)
    assert report.personal_ratio == pytest.approx(20.0)
    assert report.categories == (("Groceries", 300.0), ("Tuition", 300.0))
    assert list(report.transactions["amount"]) == [200.0, 300.0, 100.0]


def test_personal_expense_report_empty_and_without_income(ledger) -> None:
    empty = personal_expense_report(ledger, 2022, 1)
    assert empty.total_personal == 0.0
    assert empty.categories == ()
    assert empty.transactions.empty

    only_personal = make_frame([("2024-07-01", "expense", 80, "Food", True)])
    report = personal_expense_report(only_personal, 2024, 7)
    assert report.total_personal == pytest.approx(80.0)
    assert report.personal_ratio == 0.0
